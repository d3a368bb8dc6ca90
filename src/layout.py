"""Automatic genogram layout: descendant widths, generation placement and centering."""

import logging
import math
from dataclasses import dataclass

from events import (
    DESCENDANT_WIDTH,
    EMPTY_INPUT,
    GENERATION_STARTED,
    LAYOUT_CENTERED,
    ORPHANS_PLACED,
    OVERLAP_ADJUSTED,
    POSITION_ASSIGNED,
    POSITION_REASSIGNED,
    LayoutObserver,
)
from graph import build_family_map, build_generations, parent_key, resolve_relationships
from models import DEFAULT_CONFIG, FEMALE, MALE, FamilyMap, LayoutConfig, Person, Relationship, index_persons

COUPLE = "couple"
SINGLE = "single"


def snap_to_grid(value: float, grid_size: int = DEFAULT_CONFIG.grid_size) -> int:
    """Round to the nearest grid line, halves rounding up."""
    return int(math.floor(value / grid_size + 0.5)) * grid_size


def group_couples_and_singles(person_ids: list, family: FamilyMap, persons_by_id: dict) -> list[dict]:
    """
    Pair up spouses that are both in `person_ids`.

    Returns groups in first-encounter order, each ``{"type": "couple" | "single", "ids": [...]}``.
    A male/female couple is ordered male first; otherwise the person met first
    goes on the left.
    """
    members = set(person_ids)
    processed = set()
    groups = []

    for pid in person_ids:
        if pid in processed:
            continue

        spouse = family.marriages.get(pid)
        if spouse is not None and spouse != pid and spouse in members and spouse not in processed:
            left, right = pid, spouse
            person, partner = persons_by_id.get(pid), persons_by_id.get(spouse)
            if person and partner and person.gender == FEMALE and partner.gender == MALE:
                left, right = spouse, pid
            groups.append({"type": COUPLE, "ids": [left, right]})
            processed.update((pid, spouse))
        else:
            groups.append({"type": SINGLE, "ids": [pid]})
            processed.add(pid)

    return groups


def calculate_descendant_widths(
    generations: dict,
    family: FamilyMap,
    config: LayoutConfig = DEFAULT_CONFIG,
    observer: LayoutObserver | None = None,
) -> dict:
    """
    Horizontal space needed by each family unit's whole descendant subtree.

    Generations are walked deepest first, so a child couple's width is
    always known before its parents' unit is measured.
    """
    observer = observer or LayoutObserver()
    spacing = config.horizontal_spacing
    levels = {pid: level for level, ids in generations.items() for pid in ids}
    widths: dict = {}

    for level in sorted(generations, reverse=True):
        for key, children in family.children_by_parents.items():
            parents = family.unit_parents[key]
            if levels.get(parents[0]) != level:
                continue

            width = 0
            # A married-in spouse with no family of their own takes a slot beside the child
            for child in children:
                spouse = family.marriages.get(child)
                if spouse is not None and not family.parents_of_child.get(spouse):
                    width += spacing

            for child in children:
                spouse = family.marriages.get(child)
                child_key = parent_key([child, spouse] if spouse is not None else [child])
                width = max(width, widths.get(child_key, 0))

            width = max(width, spacing)
            widths[key] = width
            observer.emit(DESCENDANT_WIDTH, parents=key, width=width)

    return widths


@dataclass
class ParentGroup:
    key: str
    center_x: float
    child_groups: list
    total_width: float

    @property
    def ids(self) -> list:
        return [pid for group in self.child_groups for pid in group["ids"]]


class GenerationPositioner:
    """Assigns x/y to every person, one generation at a time, top-down."""

    def __init__(
        self,
        persons_by_id: dict,
        family: FamilyMap,
        descendant_widths: dict,
        config: LayoutConfig = DEFAULT_CONFIG,
        observer: LayoutObserver | None = None,
    ):
        self.persons_by_id = persons_by_id
        self.family = family
        self.descendant_widths = descendant_widths
        self.config = config
        self.observer = observer or LayoutObserver()
        self.placed: set = set()

    def place(self, person_id, x: float, y: float) -> None:
        person = self.persons_by_id.get(person_id)
        if person is None:
            return

        grid = self.config.grid_size
        new_x, new_y = snap_to_grid(x, grid), snap_to_grid(y, grid)
        if person_id in self.placed:
            # Last write wins
            self.observer.emit(
                POSITION_REASSIGNED,
                logging.WARNING,
                person=person_id,
                name=person.name,
                previous=(person.x, person.y),
                current=(new_x, new_y),
            )
        person.x, person.y = new_x, new_y
        self.placed.add(person_id)
        self.observer.emit(POSITION_ASSIGNED, person=person_id, name=person.name, x=new_x, y=new_y)

    def place_row(self, person_ids: list, start_x: float, y: float) -> float:
        """Place ids left to right one spacing apart; returns the unsnapped x of the last one."""
        spacing = self.config.horizontal_spacing
        x = start_x
        for pid in person_ids:
            self.place(pid, x, y)
            x += spacing
        return x - spacing

    def apply(self, generations: dict) -> None:
        config = self.config
        for index, level in enumerate(sorted(generations)):
            person_ids = generations[level]
            y = config.start_y + level * config.vertical_spacing
            self.observer.emit(GENERATION_STARTED, level=level, y=y, count=len(person_ids))

            if index == 0:
                self.layout_first_generation(person_ids, y)
            else:
                self.layout_descendant_generation(person_ids, y)

    def layout_first_generation(self, person_ids: list, y: float) -> None:
        config = self.config
        spacing = config.horizontal_spacing
        center_x = config.first_generation_center_x
        groups = group_couples_and_singles(person_ids, self.family, self.persons_by_id)

        # Paternal and maternal grandparents: push the couples apart by their descendants' width
        if len(groups) == 2 and all(g["type"] == COUPLE for g in groups):
            left, right = groups
            left_width = self.descendant_widths.get(parent_key(left["ids"])) or spacing
            right_width = self.descendant_widths.get(parent_key(right["ids"])) or spacing
            gap = max((left_width + right_width) / 4, config.grandparent_min_gap)

            self.place_row(left["ids"], center_x - gap - spacing / 2, y)
            self.place_row(right["ids"], center_x + gap - spacing / 2, y)
            return

        ids = [pid for group in groups for pid in group["ids"]]
        total_width = (len(ids) - 1) * spacing
        self.place_row(ids, center_x - total_width / 2, y)

    def _collect_parent_groups(self, person_ids: list) -> tuple[list, set]:
        family = self.family
        members = set(person_ids)
        children_by_key: dict = {}
        parents_by_key: dict = {}
        with_parents: set = set()

        for pid in person_ids:
            parents = family.parents_of_child.get(pid)
            if not parents or len(parents) > 2:
                continue
            parent_ids = tuple(sorted(parents, key=str))
            # Center on parents already placed in this run
            placed_parents = tuple(p for p in parent_ids if p in self.placed)
            if not placed_parents:
                continue
            key = parent_key(parent_ids)
            parents_by_key[key] = placed_parents
            children = children_by_key.setdefault(key, [])
            if pid not in children:
                children.append(pid)
            with_parents.add(pid)

        # Spouses with no recorded parents stand beside their partner
        for children in children_by_key.values():
            spouses = []
            for child in children:
                spouse = family.marriages.get(child)
                if (
                    spouse is not None
                    and spouse in members
                    and spouse not in children
                    and spouse not in spouses
                    and not family.parents_of_child.get(spouse)
                ):
                    spouses.append(spouse)
                    with_parents.add(spouse)
            children.extend(spouses)

        spacing = self.config.horizontal_spacing
        parent_groups = []
        for key, children in children_by_key.items():
            parents = [self.persons_by_id[p] for p in parents_by_key[key] if p in self.persons_by_id]
            if not parents:
                continue
            center_x = sum(p.x for p in parents) / len(parents)
            child_groups = group_couples_and_singles(children, family, self.persons_by_id)
            count = sum(len(g["ids"]) for g in child_groups)
            parent_groups.append(ParentGroup(key, center_x, child_groups, (count - 1) * spacing))

        return parent_groups, with_parents

    def layout_descendant_generation(self, person_ids: list, y: float) -> None:
        config = self.config
        parent_groups, with_parents = self._collect_parent_groups(person_ids)

        ordered = sorted(parent_groups, key=lambda g: g.center_x)
        two_sided = (
            len(ordered) == 2
            and ordered[1].center_x - ordered[0].center_x > config.two_sided_gap_threshold
        )

        last_x = None
        for group in ordered:
            start_x = group.center_x - group.total_width / 2
            if last_x is not None and start_x < last_x + config.group_gap:
                start_x = last_x + config.group_gap
                self.observer.emit(
                    OVERLAP_ADJUSTED, parents=group.key, start_x=start_x, two_sided=two_sided
                )
            last_x = self.place_row(group.ids, start_x, y)

        orphans = [pid for pid in person_ids if pid not in with_parents]
        if orphans:
            if last_x is not None:
                x = last_x + config.horizontal_spacing + config.group_gap
            else:
                x = config.orphan_fallback_x
            self.observer.emit(ORPHANS_PLACED, persons=list(orphans), start_x=x, y=y)
            self.place_row(orphans, x, y)


def apply_layout(
    generations: dict,
    family: FamilyMap,
    descendant_widths: dict,
    persons_by_id: dict,
    config: LayoutConfig = DEFAULT_CONFIG,
    observer: LayoutObserver | None = None,
) -> None:
    """Set x/y on every person in `generations`."""
    positioner = GenerationPositioner(persons_by_id, family, descendant_widths, config, observer)
    positioner.apply(generations)


def center_layout(
    persons: list[Person],
    config: LayoutConfig = DEFAULT_CONFIG,
    observer: LayoutObserver | None = None,
) -> None:
    """Translate everyone so the bounding box center lands on the target point."""
    observer = observer or LayoutObserver()
    if not persons:
        return

    xs = [p.x for p in persons]
    ys = [p.y for p in persons]
    center_x = (min(xs) + max(xs)) / 2
    center_y = (min(ys) + max(ys)) / 2

    # Offsets stay on the grid so snapped coordinates remain snapped
    offset_x = snap_to_grid(config.target_x - center_x, config.grid_size)
    offset_y = snap_to_grid(config.target_y - center_y, config.grid_size)

    for p in persons:
        p.x += offset_x
        p.y += offset_y

    observer.emit(LAYOUT_CENTERED, offset_x=offset_x, offset_y=offset_y)


def layout(
    persons: list[Person],
    relationships: list[Relationship],
    config: LayoutConfig = DEFAULT_CONFIG,
    observer: LayoutObserver | None = None,
) -> None:
    """
    Arrange a genogram in place.

    Builds generation levels and family units from `relationships`, measures
    each unit's descendant width, positions generations top-down and
    finally centers the whole diagram on the target point. Only `x` and
    `y` of each person change. Relationships naming unknown persons are
    ignored.

    Args:
        persons: People to arrange; mutated in place
        relationships: Marriage, parent-child and emotional relationships
        config: Spacing and anchor settings
        observer: Receives trace events (defaults to logging)
    """
    observer = observer or LayoutObserver()
    if not persons:
        observer.emit(EMPTY_INPUT, logging.INFO)
        return

    persons_by_id = index_persons(persons)
    relationships = resolve_relationships(persons, relationships, observer)

    generations, _ = build_generations(persons, relationships, observer)
    family = build_family_map(relationships, observer)
    descendant_widths = calculate_descendant_widths(generations, family, config, observer)

    apply_layout(generations, family, descendant_widths, persons_by_id, config, observer)
    center_layout(persons, config, observer)
