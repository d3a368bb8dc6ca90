"""Tests for the command line pipeline and preview plots."""

import json

from main import main
from models import BIOLOGICAL, FEMALE, MALE, MARRIAGE, Person, Relationship
from plotting import plot_genogram

PROJECT = {
    "persons": [
        {"id": "dad", "name": "Dad", "gender": "male"},
        {"id": "mom", "name": "Mom", "gender": "female", "isCT": True},
        {"id": "kid", "name": "Kid", "gender": "unknown"},
    ],
    "relationships": [
        {"from": "dad", "to": "mom", "type": "marriage"},
        {"from": "dad", "to": "kid", "type": "biological"},
        {"from": "mom", "to": "kid", "type": "adopted"},
        {"from": "mom", "to": "ghost", "type": "emotional"},
    ],
    "zoom": 1,
}


def write_project(tmp_path, data=PROJECT):
    path = tmp_path / "family.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_main_writes_laid_out_project(tmp_path, capsys):
    path = write_project(tmp_path)

    assert main([str(path), "--validate"]) == 0

    output = json.loads((tmp_path / "family.layout.json").read_text(encoding="utf-8"))
    positions = {p["id"]: (p["x"], p["y"]) for p in output["persons"]}
    assert positions["dad"][1] == positions["mom"][1] < positions["kid"][1]
    assert positions["mom"][0] - positions["dad"][0] == 150
    assert output["zoom"] == 1
    assert len(output["relationships"]) == 4

    out = capsys.readouterr().out
    assert "Found 3 persons and 4 relationships" in out
    assert "unknown person" in out


def test_main_with_plot_and_custom_spacing(tmp_path):
    path = write_project(tmp_path)
    output_path = tmp_path / "out.json"
    plot_path = tmp_path / "family.png"

    code = main(
        [str(path), "-o", str(output_path), "--plot", str(plot_path), "--horizontal-spacing", "200"]
    )

    assert code == 0
    assert plot_path.stat().st_size > 0
    output = json.loads(output_path.read_text(encoding="utf-8"))
    xs = {p["id"]: p["x"] for p in output["persons"]}
    assert xs["mom"] - xs["dad"] == 200


def test_main_reports_unreadable_input(tmp_path, capsys):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    assert main([str(path)]) == 1
    assert "could not load" in capsys.readouterr().out


def test_main_rejects_project_without_persons(tmp_path):
    path = write_project(tmp_path, {"relationships": []})

    assert main([str(path)]) == 1


def test_plot_genogram_draws_every_symbol(tmp_path):
    persons = [
        Person("a", "A", MALE, x=450, y=300),
        Person("b", "B", FEMALE, x=600, y=300, is_ct=True),
        Person("c", "C", x=525, y=450),
    ]
    rels = [
        Relationship("a", "b", MARRIAGE),
        Relationship("a", "c", BIOLOGICAL),
        Relationship("b", "c", BIOLOGICAL),
    ]
    path = tmp_path / "preview.svg"

    plot_genogram(persons, rels, path)

    assert path.read_text(encoding="utf-8").lstrip().startswith("<?xml")
