"""Tests for project JSON and GEDCOM loading."""

import json

import pytest

from models import BIOLOGICAL, FEMALE, MALE, MARRIAGE, UNKNOWN, Person, Relationship
from parsing import (
    load_gedcom,
    load_input,
    load_project,
    normalize_xref,
    project_from_dict,
    project_to_dict,
    save_project,
)

PROJECT = {
    "persons": [
        {"id": "p1", "name": "Kim", "gender": "male", "x": 10, "y": 20, "isCT": True, "age": 54},
        {"id": "p2", "name": "Lee", "gender": "female", "notes": "nurse"},
        {"id": "p3", "gender": "robot"},
    ],
    "relationships": [
        {"id": "r1", "from": "p1", "to": "p2", "type": "marriage", "subtype": "married"},
        {"id": "r2", "from": "p1", "to": "p3"},
        {"id": "r3", "to": "p3"},
    ],
    "zoom": 1.5,
    "pan": {"x": 0, "y": 0},
}

GEDCOM = """0 HEAD
1 GEDC
2 VERS 5.5.1
2 FORM LINEAGE-LINKED
1 CHAR UTF-8
0 @I1@ INDI
1 NAME John /Smith/
1 SEX M
1 FAMS @F1@
0 @I2@ INDI
1 NAME Mary /Jones/
1 SEX F
1 FAMS @F1@
0 @I3@ INDI
1 NAME Ann /Smith/
1 FAMC @F1@
0 @F1@ FAM
1 HUSB @I1@
1 WIFE @I2@
1 CHIL @I3@
0 TRLR
"""


def test_project_from_dict():
    persons, relationships = project_from_dict(PROJECT)

    kim, lee, unnamed = persons
    assert kim == Person(id="p1", name="Kim", gender=MALE, x=10, y=20, is_ct=True, extra={"age": 54})
    assert lee.gender == FEMALE
    assert lee.extra == {"notes": "nurse"}
    assert unnamed.gender == UNKNOWN
    assert unnamed.name == ""

    # r3 has no "from" and is skipped
    assert relationships == [
        Relationship("p1", "p2", MARRIAGE, id="r1", extra={"subtype": "married"}),
        Relationship("p1", "p3", BIOLOGICAL, id="r2"),
    ]


def test_project_without_persons_is_rejected():
    with pytest.raises(ValueError, match="persons"):
        project_from_dict({"relationships": []})


def test_project_to_dict_keeps_unknown_keys():
    persons, relationships = project_from_dict(PROJECT)
    persons[1].x, persons[1].y = 350, 400

    document = project_to_dict(persons, relationships, PROJECT)

    assert document["zoom"] == 1.5
    assert document["persons"][1] == {
        "notes": "nurse",
        "id": "p2",
        "name": "Lee",
        "gender": FEMALE,
        "x": 350,
        "y": 400,
        "isCT": False,
    }
    assert document["relationships"][0] == {
        "subtype": "married",
        "from": "p1",
        "to": "p2",
        "type": MARRIAGE,
        "id": "r1",
    }
    # The input document is not modified
    assert PROJECT["persons"][1] == {"id": "p2", "name": "Lee", "gender": "female", "notes": "nurse"}


def test_save_and_load_project(tmp_path):
    path = tmp_path / "family.json"
    persons, relationships = project_from_dict(PROJECT)

    save_project(path, persons, relationships, {"zoom": 2})
    loaded_persons, loaded_relationships, document = load_project(path)

    assert loaded_persons == persons
    assert loaded_relationships == relationships
    assert document["zoom"] == 2


def test_normalize_xref():
    assert normalize_xref("@I12@") == "I12"
    assert normalize_xref("F1") == "F1"


def test_load_gedcom(tmp_path):
    path = tmp_path / "family.ged"
    path.write_text(GEDCOM, encoding="utf-8")

    persons, relationships = load_gedcom(path)

    assert [p.id for p in persons] == ["I1", "I2", "I3"]
    assert [p.gender for p in persons] == [MALE, FEMALE, UNKNOWN]
    assert "John" in persons[0].name and "Smith" in persons[0].name
    assert relationships == [
        Relationship("I1", "I2", MARRIAGE),
        Relationship("I1", "I3", BIOLOGICAL),
        Relationship("I2", "I3", BIOLOGICAL),
    ]


def test_load_input_dispatches_on_extension(tmp_path):
    project_path = tmp_path / "family.json"
    project_path.write_text(json.dumps(PROJECT), encoding="utf-8")
    gedcom_path = tmp_path / "family.ged"
    gedcom_path.write_text(GEDCOM, encoding="utf-8")

    persons, _, document = load_input(project_path)
    assert len(persons) == 3
    assert document["zoom"] == 1.5

    persons, relationships, document = load_input(gedcom_path)
    assert len(persons) == 3
    assert len(relationships) == 3
    assert document == {}


def test_load_input_rejects_unknown_extension(tmp_path):
    path = tmp_path / "family.csv"
    path.write_text("id,name\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Unsupported"):
        load_input(path)
