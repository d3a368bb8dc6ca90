"""Genogram data validation."""

from collections import Counter

import networkx as nx

from graph import build_lineage_graph
from models import MARRIAGE, Person, Relationship


def validate_family(persons: list[Person], relationships: list[Relationship]) -> list[str]:
    """
    Validate genogram data for:
    - Relationships pointing at unknown persons
    - Self-referencing relationships
    - Cycles in parent-child relationships
    - Children with more than two parents
    - Persons married more than once
    - More than one focal person

    None of these stop the layout; they explain odd placements.
    Returns a list of warning messages.
    """
    warnings: list[str] = []
    names = {p.id: p.name or str(p.id) for p in persons}

    known = []
    for rel in relationships:
        missing = [pid for pid in (rel.from_id, rel.to_id) if pid not in names]
        if missing:
            warnings.append(
                f"Relationship {rel.type} {rel.from_id} -> {rel.to_id} references "
                f"unknown person(s): {missing}"
            )
            continue
        if rel.from_id == rel.to_id:
            warnings.append(f"Relationship {rel.type} links {names[rel.from_id]} to themselves")
            continue
        known.append(rel)

    G = build_lineage_graph(persons, known)

    try:
        cycle = nx.find_cycle(G, orientation="original")
        cycle_names = [names[edge[0]] for edge in cycle]
        warnings.append(f"Cycle detected in parent-child relationships: {cycle_names}")
    except nx.NetworkXNoCycle:
        pass

    for child in G.nodes:
        parents = list(G.predecessors(child))
        if len(parents) > 2:
            parent_names = sorted(names[p] for p in parents)
            warnings.append(
                f"{names[child]} has {len(parents)} recorded parents ({', '.join(parent_names)}); "
                f"they will not be placed under any family"
            )

    marriage_counts = Counter()
    for rel in known:
        if rel.type == MARRIAGE:
            marriage_counts[rel.from_id] += 1
            marriage_counts[rel.to_id] += 1
    for pid, count in marriage_counts.items():
        if count > 1:
            warnings.append(
                f"{names[pid]} has {count} marriages; only the last one is used for layout"
            )

    focal = [p for p in persons if p.is_ct]
    if len(focal) > 1:
        warnings.append(
            f"{len(focal)} focal persons marked: {', '.join(names[p.id] for p in focal)}"
        )

    return warnings
