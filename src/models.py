"""Data classes for genogram entities and layout settings."""

from dataclasses import dataclass, field

# Relationship types
MARRIAGE = "marriage"
BIOLOGICAL = "biological"
ADOPTED = "adopted"
FOSTER = "foster"
EMOTIONAL = "emotional"

PARENT_CHILD_TYPES = frozenset({BIOLOGICAL, ADOPTED, FOSTER})

# Genders
MALE = "male"
FEMALE = "female"
UNKNOWN = "unknown"


@dataclass
class Person:
    id: str
    name: str = ""
    gender: str = UNKNOWN  # male, female, unknown
    x: float = 0
    y: float = 0
    is_ct: bool = False  # focal (client) person
    extra: dict = field(default_factory=dict)


@dataclass
class Relationship:
    from_id: str  # parent for parent-child types
    to_id: str
    type: str  # marriage, biological, adopted, foster, emotional
    id: str | None = None
    extra: dict = field(default_factory=dict)


@dataclass
class FamilyMap:
    marriages: dict = field(default_factory=dict)  # person id -> spouse id
    children_by_parents: dict = field(default_factory=dict)  # parent key -> [child ids]
    parents_of_child: dict = field(default_factory=dict)  # child id -> {parent ids}
    unit_parents: dict = field(default_factory=dict)  # parent key -> (parent ids)


@dataclass(frozen=True)
class LayoutConfig:
    horizontal_spacing: int = 150
    vertical_spacing: int = 150
    start_y: int = 100
    grid_size: int = 50
    first_generation_center_x: int = 500
    grandparent_min_gap: int = 100
    two_sided_gap_threshold: int = 250
    group_gap: int = 50
    orphan_fallback_x: int = 1000
    target_x: int = 500
    target_y: int = 300


DEFAULT_CONFIG = LayoutConfig()


def index_persons(persons: list[Person]) -> dict:
    """Build the id -> Person lookup used to resolve relationship endpoints."""
    return {p.id: p for p in persons}
