"""NetworkX lineage graph, generation levels and family units."""

import logging
from collections import deque

import networkx as nx

from events import (
    DANGLING_RELATIONSHIP,
    FALLBACK_ROOT,
    FAMILY_UNIT_RESOLVED,
    GENERATIONS_BUILT,
    UNREACHED_PERSON,
    LayoutObserver,
)
from models import MARRIAGE, PARENT_CHILD_TYPES, FamilyMap, Person, Relationship

KEY_SEPARATOR = "|"


def parent_key(parent_ids) -> str:
    """Canonical key for a family unit: one parent id, or two sorted and joined."""
    return KEY_SEPARATOR.join(sorted(str(p) for p in parent_ids))


def resolve_relationships(
    persons: list[Person],
    relationships: list[Relationship],
    observer: LayoutObserver | None = None,
) -> list[Relationship]:
    """Drop relationships whose endpoints are not among `persons`."""
    observer = observer or LayoutObserver()
    known = {p.id for p in persons}

    resolved = []
    for rel in relationships:
        if rel.from_id in known and rel.to_id in known:
            resolved.append(rel)
        else:
            observer.emit(
                DANGLING_RELATIONSHIP,
                logging.WARNING,
                relationship=rel.id,
                from_id=rel.from_id,
                to_id=rel.to_id,
                type=rel.type,
            )
    return resolved


def build_lineage_graph(persons: list[Person], relationships: list[Relationship]) -> nx.DiGraph:
    """
    Build a directed graph of parent -> child edges.

    Every person becomes a node (even without relationships). Only the
    parent-child relationship types produce edges; marriages are kept apart
    in `build_marriages` because a couple may also share a parent-child edge
    in malformed data and a DiGraph holds one edge per pair.
    """
    G = nx.DiGraph()

    for p in persons:
        G.add_node(p.id, person_name=p.name, gender=p.gender, is_ct=p.is_ct)

    for rel in relationships:
        if rel.type in PARENT_CHILD_TYPES:
            G.add_edge(rel.from_id, rel.to_id, relationship_type=rel.type)

    return G


def build_marriages(relationships: list[Relationship]) -> dict:
    """Symmetric person -> spouse map. A later marriage replaces an earlier one."""
    marriages = {}
    for rel in relationships:
        if rel.type == MARRIAGE:
            marriages[rel.from_id] = rel.to_id
            marriages[rel.to_id] = rel.from_id
    return marriages


def choose_fallback_root(persons: list[Person]) -> Person:
    """Root used when no parentless person exists: the focal person, else the first one."""
    for p in persons:
        if p.is_ct:
            return p
    return persons[0]


def find_root_candidates(persons: list[Person], G: nx.DiGraph, marriages: dict) -> list:
    """
    Persons without recorded parents, in input order.

    A parentless person married to someone who does have parents is a
    married-in spouse; they are reached through that spouse instead of
    seeding a second top-level family.
    """
    roots = []
    for p in persons:
        if G.in_degree(p.id) > 0:
            continue
        spouse = marriages.get(p.id)
        if spouse is not None and G.in_degree(spouse) > 0:
            continue
        roots.append(p.id)
    return roots


def _lineage_steps(G: nx.DiGraph, person_id):
    # Children sit one level below, parents one level above.
    for child in G.successors(person_id):
        yield child, 1
    for parent in G.predecessors(person_id):
        yield parent, -1


def build_generations(
    persons: list[Person],
    relationships: list[Relationship],
    observer: LayoutObserver | None = None,
) -> tuple[dict, dict]:
    """
    Assign every person an integer generation level.

    BFS runs from all roots at once and expands in both directions: towards
    children (+1) and towards parents (-1), pulling each newly reached
    person's spouse onto the same level. Persons never reached are placed
    one level below the deepest reached one. Levels are shifted so the
    smallest is 0.

    Returns:
        (generations, levels): level -> [person ids] in visit order, and
        person id -> level.
    """
    observer = observer or LayoutObserver()
    if not persons:
        return {}, {}

    G = build_lineage_graph(persons, relationships)
    marriages = build_marriages(relationships)

    roots = find_root_candidates(persons, G, marriages)
    if not roots:
        root = choose_fallback_root(persons)
        observer.emit(FALLBACK_ROOT, logging.INFO, person=root.id, name=root.name, is_ct=root.is_ct)
        roots = [root.id]

    levels: dict = {}
    queue: deque = deque()

    def visit(person_id, level):
        levels[person_id] = level
        queue.append((person_id, level))

    for root in roots:
        if root not in levels:
            visit(root, 0)
        spouse = marriages.get(root)
        if spouse is not None and spouse not in levels:
            visit(spouse, 0)

    while queue:
        person_id, level = queue.popleft()
        for relative, delta in _lineage_steps(G, person_id):
            if relative in levels:
                continue
            visit(relative, level + delta)
            spouse = marriages.get(relative)
            if spouse is not None and spouse not in levels:
                visit(spouse, level + delta)

    unreached = [p for p in persons if p.id not in levels]
    if unreached:
        fallback_level = max(levels.values()) + 1 if levels else 0
        for p in unreached:
            levels[p.id] = fallback_level
            observer.emit(UNREACHED_PERSON, logging.INFO, person=p.id, name=p.name, level=fallback_level)

    min_level = min(levels.values())
    if min_level < 0:
        levels = {pid: level - min_level for pid, level in levels.items()}

    generations: dict = {}
    for pid, level in levels.items():
        generations.setdefault(level, []).append(pid)

    observer.emit(
        GENERATIONS_BUILT,
        count=len(generations),
        sizes={level: len(ids) for level, ids in sorted(generations.items())},
    )
    return generations, levels


def build_family_map(
    relationships: list[Relationship], observer: LayoutObserver | None = None
) -> FamilyMap:
    """
    Group children into family units keyed by their parents.

    A child of two mutually married parents belongs to the couple's unit.
    A child of two unmarried parents is listed under each parent's own
    single-parent unit. Children with no parents or more than two are left
    out of every unit.
    """
    observer = observer or LayoutObserver()
    family = FamilyMap(marriages=build_marriages(relationships))

    for rel in relationships:
        if rel.type in PARENT_CHILD_TYPES:
            family.parents_of_child.setdefault(rel.to_id, set()).add(rel.from_id)

    for child, parents in family.parents_of_child.items():
        parent_array = sorted(parents, key=str)

        if len(parent_array) == 2:
            p1, p2 = parent_array
            if family.marriages.get(p1) == p2:
                units = [(p1, p2)]
            else:
                units = [(p1,), (p2,)]
        elif len(parent_array) == 1:
            units = [tuple(parent_array)]
        else:
            units = []

        for unit in units:
            key = parent_key(unit)
            family.unit_parents[key] = unit
            family.children_by_parents.setdefault(key, []).append(child)

    for key, children in family.children_by_parents.items():
        observer.emit(FAMILY_UNIT_RESOLVED, parents=key, children=list(children))

    return family
