"""Tests for the scenario-script parse and check commands."""

from __future__ import annotations

import json
from pathlib import Path

import jsonschema
import pytest
from click.testing import CliRunner

from scenario_script.actions import JumpAction, Return, TextAction
from scenario_script.cli import main
from scenario_script.export import ExportError, document_to_dict, validate_document_dict
from scenario_script.parser import parse_text
from scenario_script.scene import Document, Scene

_REPO_ROOT = Path(__file__).resolve().parents[1]
_SCHEMA_PATH = _REPO_ROOT / "src/scenario_script/schemas/Document.v1.json"
_EXAMPLE = _REPO_ROOT / "tests/examples/demo.scn"

_MINIMAL_SCRIPT = """\
author a { }
scene s {
    author a { branch b { } }
}
"""


# ---------------------------------------------------------------------------
# Test 1 — Summary output without --out
# ---------------------------------------------------------------------------

def test_parse_prints_summary(script_file):
    runner = CliRunner()
    result = runner.invoke(main, ["parse", "--script", str(script_file(_MINIMAL_SCRIPT))])
    assert result.exit_code == 0, f"parse failed: {result.output}"
    assert result.output.strip() == "scene s: authors=a branches=b"


# ---------------------------------------------------------------------------
# Test 2 — JSON export conforms to Document.v1.json
# ---------------------------------------------------------------------------

def test_parse_writes_valid_json(script_file, tmp_path):
    runner = CliRunner()
    out = tmp_path / "out" / "document.json"
    result = runner.invoke(
        main, ["parse", "--script", str(script_file(_MINIMAL_SCRIPT)), "--out", str(out)]
    )
    assert result.exit_code == 0, f"parse failed: {result.output}"

    data = json.loads(out.read_text(encoding="utf-8"))
    schema = json.loads(_SCHEMA_PATH.read_text(encoding="utf-8"))
    jsonschema.validate(data, schema)

    assert data == {
        "schema_id": "ScenarioDocument",
        "schema_version": "1.0",
        "authors": ["a"],
        "scenes": [
            {"id": "s", "authors": ["a"], "branches": [{"id": "b", "steps": []}]},
        ],
    }


# ---------------------------------------------------------------------------
# Test 3 — Output is byte-identical across two runs
# ---------------------------------------------------------------------------

def test_parse_deterministic(tmp_path):
    runner = CliRunner()
    out1 = tmp_path / "doc1.json"
    out2 = tmp_path / "doc2.json"

    r1 = runner.invoke(main, ["parse", "--script", str(_EXAMPLE), "--out", str(out1)])
    r2 = runner.invoke(main, ["parse", "--script", str(_EXAMPLE), "--out", str(out2)])

    assert r1.exit_code == 0
    assert r2.exit_code == 0
    assert out1.read_bytes() == out2.read_bytes(), "Outputs are not byte-identical"
    assert out1.read_bytes().endswith(b"}\n")


# ---------------------------------------------------------------------------
# Test 4 — Syntax errors → exit 1, nothing written
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("script", [
    "scene s {",
    "scene s { jump x }",
    'scene s { branch b { "open }',
    "jump",
])
def test_parse_syntax_error(script_file, tmp_path, script):
    runner = CliRunner()
    out = tmp_path / "document.json"
    result = runner.invoke(
        main, ["parse", "--script", str(script_file(script)), "--out", str(out)]
    )
    assert result.exit_code == 1
    assert not out.exists(), "Output file must not be written on failure"
    assert result.stderr.startswith("ERROR: ")


def test_error_reports_file_and_position(script_file):
    runner = CliRunner()
    p = script_file("scene s {\n  jump x\n}\n")
    result = runner.invoke(main, ["check", "--script", str(p)])
    assert result.exit_code == 1
    assert result.stderr.startswith(f"ERROR: {p}:2:3: ")


def test_invalid_utf8(script_file):
    p = script_file("")
    p.write_bytes(b"scene \xff { }")
    result = CliRunner().invoke(main, ["check", "--script", str(p)])
    assert result.exit_code == 1
    assert "UTF-8" in result.stderr


# ---------------------------------------------------------------------------
# Test 5 — Missing script → click usage error
# ---------------------------------------------------------------------------

def test_parse_missing_script(tmp_path):
    runner = CliRunner()
    result = runner.invoke(main, ["parse", "--script", str(tmp_path / "nope.scn")])
    assert result.exit_code == 2


# ---------------------------------------------------------------------------
# Test 6 — check command
# ---------------------------------------------------------------------------

def test_check_ok():
    runner = CliRunner()
    result = runner.invoke(main, ["check", "--script", str(_EXAMPLE)])
    assert result.exit_code == 0, f"check failed: {result.output}"
    assert result.output.strip() == "OK: 2 scene(s)"


def test_verbose_flag_accepted():
    runner = CliRunner()
    result = runner.invoke(main, ["--verbose", "check", "--script", str(_EXAMPLE)])
    assert result.exit_code == 0, f"check failed: {result.output}"


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

def test_export_steps():
    document = parse_text("scene s { branch b { } }")
    branch = document.get_scene("s").get_branch("b")
    branch.block.append(TextAction("Hello."))
    branch.block.append(JumpAction("c"))
    branch.block.append(Return())

    data = validate_document_dict(document_to_dict(document))
    assert data["scenes"][0]["branches"][0]["steps"] == [
        {"type": "text", "text": "Hello."},
        {"type": "jump", "label": "c"},
        {"type": "return"},
    ]


def test_export_rejects_contract_violation():
    data = document_to_dict(Document(scenes=[Scene("s")]))
    data["schema_version"] = "2.0"
    with pytest.raises(ExportError, match="contract"):
        validate_document_dict(data)


def test_export_rejects_duplicate_branch_ids():
    data = document_to_dict(parse_text("scene s { branch b { } }"))
    data["scenes"][0]["branches"].append({"id": "b", "steps": []})
    with pytest.raises(ExportError, match="duplicate branch ids"):
        validate_document_dict(data)
