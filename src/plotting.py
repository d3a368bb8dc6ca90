"""Preview plots of arranged genograms."""

from pathlib import Path

import matplotlib.pyplot as plt
from matplotlib.patches import Circle, Polygon, Rectangle

from graph import build_family_map, resolve_relationships
from models import FEMALE, MALE, MARRIAGE, Person, Relationship, index_persons

SYMBOL_SIZE = 50
LINE_COLOR = "dimgray"


def _draw_person(ax, person: Person) -> None:
    half = SYMBOL_SIZE / 2
    if person.gender == MALE:
        fillcolor = "lightblue"
    elif person.gender == FEMALE:
        fillcolor = "lightpink"
    else:
        fillcolor = "lightgray"

    def shape(scale: float, **kwargs):
        h = half * scale
        if person.gender == MALE:
            return Rectangle((person.x - h, person.y - h), 2 * h, 2 * h, **kwargs)
        if person.gender == FEMALE:
            return Circle((person.x, person.y), h, **kwargs)
        return Polygon(
            [(person.x, person.y - h), (person.x + h, person.y), (person.x, person.y + h), (person.x - h, person.y)],
            closed=True,
            **kwargs,
        )

    ax.add_patch(shape(1.0, facecolor=fillcolor, edgecolor="black", linewidth=1.5, zorder=3))
    if person.is_ct:
        # Focal person gets a double outline
        ax.add_patch(shape(0.8, facecolor="none", edgecolor="black", linewidth=1.0, zorder=4))

    ax.text(person.x, person.y + half + 12, person.name, ha="center", va="top", fontsize=7, zorder=5)


def plot_genogram(
    persons: list[Person],
    relationships: list[Relationship],
    output_path: Path | None = None,
):
    """
    Plot an arranged genogram using each person's x/y.

    Draws:
    - Squares (male), circles (female) and diamonds (unknown)
    - A marriage line between spouses
    - A sibship line from each family unit's parents down to its children

    Emotional relationships are not drawn.

    Args:
        persons: Persons with coordinates already assigned
        relationships: Relationships between them
        output_path: Path to save the image (PNG, SVG, PDF). If None, displays interactively.
    """
    persons_by_id = index_persons(persons)
    relationships = resolve_relationships(persons, relationships)
    family = build_family_map(relationships)

    fig, ax = plt.subplots(figsize=(12, 9))

    for rel in relationships:
        if rel.type != MARRIAGE:
            continue
        a, b = persons_by_id[rel.from_id], persons_by_id[rel.to_id]
        ax.plot([a.x, b.x], [a.y, b.y], color=LINE_COLOR, linewidth=1.5, zorder=1)

    for key, child_ids in family.children_by_parents.items():
        parents = [persons_by_id[p] for p in family.unit_parents[key]]
        children = [persons_by_id[c] for c in child_ids]

        parent_x = sum(p.x for p in parents) / len(parents)
        parent_y = max(p.y for p in parents)
        bar_y = (parent_y + min(c.y for c in children)) / 2

        xs = [c.x for c in children] + [parent_x]
        ax.plot([parent_x, parent_x], [parent_y, bar_y], color=LINE_COLOR, linewidth=1, zorder=1)
        ax.plot([min(xs), max(xs)], [bar_y, bar_y], color=LINE_COLOR, linewidth=1, zorder=1)
        for c in children:
            ax.plot([c.x, c.x], [bar_y, c.y], color=LINE_COLOR, linewidth=1, zorder=1)

    for p in persons:
        _draw_person(ax, p)

    if persons:
        margin = SYMBOL_SIZE * 2
        xs = [p.x for p in persons]
        ys = [p.y for p in persons]
        ax.set_xlim(min(xs) - margin, max(xs) + margin)
        ax.set_ylim(max(ys) + margin, min(ys) - margin)  # canvas y grows downwards

    ax.set_aspect("equal")
    ax.axis("off")
    ax.set_title(f"Genogram ({len(persons)} people, {len(relationships)} relationships)")
    fig.tight_layout()

    if output_path:
        fig.savefig(output_path, dpi=150, bbox_inches="tight")
        plt.close(fig)
        print(f"Genogram saved to {output_path}")
    else:
        plt.show()
