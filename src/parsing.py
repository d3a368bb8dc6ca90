"""Genogram input: editor JSON projects and GEDCOM files."""

import json
from pathlib import Path

from ged4py import GedcomReader

from models import BIOLOGICAL, FEMALE, MALE, MARRIAGE, UNKNOWN, Person, Relationship

GENDERS = {MALE, FEMALE, UNKNOWN}

# GEDCOM SEX values
SEX_MAP = {
    "M": MALE,
    "F": FEMALE,
}

PERSON_KEYS = {"id", "name", "gender", "x", "y", "isCT"}
RELATIONSHIP_KEYS = {"id", "from", "to", "type"}


# ============================================================================
# Editor JSON projects
# ============================================================================


def person_from_dict(data: dict) -> Person:
    gender = data.get("gender") or UNKNOWN
    return Person(
        id=data["id"],
        name=data.get("name") or "",
        gender=gender if gender in GENDERS else UNKNOWN,
        x=data.get("x") or 0,
        y=data.get("y") or 0,
        is_ct=bool(data.get("isCT", False)),
        extra={k: v for k, v in data.items() if k not in PERSON_KEYS},
    )


def relationship_from_dict(data: dict) -> Relationship:
    return Relationship(
        from_id=data["from"],
        to_id=data["to"],
        type=data.get("type") or BIOLOGICAL,
        id=data.get("id"),
        extra={k: v for k, v in data.items() if k not in RELATIONSHIP_KEYS},
    )


def project_from_dict(data: dict) -> tuple[list[Person], list[Relationship]]:
    """Read persons and relationships from an editor project document."""
    if not isinstance(data, dict) or not isinstance(data.get("persons"), list):
        raise ValueError("Project document must contain a 'persons' list")

    persons = [person_from_dict(p) for p in data["persons"]]
    relationships = [
        relationship_from_dict(r)
        for r in data.get("relationships") or []
        if "from" in r and "to" in r
    ]
    return persons, relationships


def project_to_dict(
    persons: list[Person], relationships: list[Relationship], base: dict | None = None
) -> dict:
    """
    Write persons and relationships back into a project document.

    Keys of `base` other than persons/relationships (zoom, pan, ...) are kept,
    and each entity keeps the unrecognised keys it was loaded with.
    """
    document = dict(base or {})
    document["persons"] = [
        {**p.extra, "id": p.id, "name": p.name, "gender": p.gender, "x": p.x, "y": p.y, "isCT": p.is_ct}
        for p in persons
    ]
    rels = []
    for r in relationships:
        entry = {**r.extra, "from": r.from_id, "to": r.to_id, "type": r.type}
        if r.id is not None:
            entry["id"] = r.id
        rels.append(entry)
    document["relationships"] = rels
    return document


def load_project(filepath: Path) -> tuple[list[Person], list[Relationship], dict]:
    """Load a JSON project; also returns the raw document for saving it back later."""
    data = json.loads(Path(filepath).read_text(encoding="utf-8"))
    persons, relationships = project_from_dict(data)
    return persons, relationships, data


def save_project(
    filepath: Path,
    persons: list[Person],
    relationships: list[Relationship],
    base: dict | None = None,
) -> None:
    document = project_to_dict(persons, relationships, base)
    Path(filepath).write_text(json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8")


# ============================================================================
# GEDCOM
# ============================================================================


def normalize_xref(xref_id: str) -> str:
    """Turn a GEDCOM xref like '@I12@' into a person id 'I12'."""
    return xref_id.strip("@")


def parse_gedcom(filepath: Path) -> GedcomReader:
    """Parse a GEDCOM file and return the reader object."""
    return GedcomReader(str(filepath))


def extract_name(indi) -> str:
    """Extract the display name from an individual record."""
    name_rec = indi.sub_tag("NAME")
    if name_rec is None or name_rec.value is None:
        return "Unknown"

    name_value = name_rec.value

    # ged4py returns NAME as tuple: (given, surname, suffix)
    if isinstance(name_value, tuple):
        parts = [p for p in name_value if p]
        return " ".join(parts) if parts else "Unknown"

    # Fallback: string format "Given /Surname/"
    return " ".join(str(name_value).replace("/", " ").split()) or "Unknown"


def extract_gender(indi) -> str:
    """Map the SEX tag of an individual record to a genogram gender."""
    sex_rec = indi.sub_tag("SEX")
    if sex_rec is None or not sex_rec.value:
        return UNKNOWN
    return SEX_MAP.get(str(sex_rec.value).upper(), UNKNOWN)


def normalize_gedcom(reader: GedcomReader) -> tuple[list[Person], list[Relationship]]:
    """
    Extract persons and relationships from parsed GEDCOM data.

    Each FAM record yields a marriage between HUSB and WIFE (when both are
    present) and a biological relationship from each of them to every CHIL.
    """
    persons: list[Person] = []
    relationships: list[Relationship] = []

    for rec in reader.records0("INDI"):
        if rec.xref_id is None:
            continue
        persons.append(
            Person(
                id=normalize_xref(rec.xref_id),
                name=extract_name(rec),
                gender=extract_gender(rec),
            )
        )

    for rec in reader.records0("FAM"):
        if rec.xref_id is None:
            continue

        husb = rec.sub_tag("HUSB")
        wife = rec.sub_tag("WIFE")
        husb_id = normalize_xref(husb.xref_id) if husb and husb.xref_id else None
        wife_id = normalize_xref(wife.xref_id) if wife and wife.xref_id else None

        if husb_id and wife_id:
            relationships.append(Relationship(from_id=husb_id, to_id=wife_id, type=MARRIAGE))

        for child in rec.sub_tags("CHIL"):
            if not child.xref_id:
                continue
            child_id = normalize_xref(child.xref_id)
            for parent_id in (husb_id, wife_id):
                if parent_id:
                    relationships.append(
                        Relationship(from_id=parent_id, to_id=child_id, type=BIOLOGICAL)
                    )

    return persons, relationships


def load_gedcom(filepath: Path) -> tuple[list[Person], list[Relationship]]:
    return normalize_gedcom(parse_gedcom(filepath))


def load_input(filepath: Path) -> tuple[list[Person], list[Relationship], dict]:
    """Load a project (.json) or GEDCOM (.ged) file."""
    filepath = Path(filepath)
    ext = filepath.suffix.lower()

    if ext == ".json":
        return load_project(filepath)
    if ext in (".ged", ".gedcom"):
        persons, relationships = load_gedcom(filepath)
        return persons, relationships, {}

    raise ValueError(f"Unsupported input file type: {filepath.name}")
