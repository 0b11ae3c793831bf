"""Document export — plain-dict conversion, contract validation and byte-stable JSON output."""

from __future__ import annotations

import json
from pathlib import Path

import jsonschema

from scenario_script.actions import JumpAction, TextAction
from scenario_script.scene import Document, Step

_DOCUMENT_SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "Document.v1.json"


class ExportError(Exception):
    """Raised when an exported document violates the Document.v1.json contract."""


def _step_to_dict(step: Step) -> dict:
    if isinstance(step, TextAction):
        return {"type": "text", "text": step.text}
    if isinstance(step, JumpAction):
        return {"type": "jump", "label": step.label}
    return {"type": "return"}


def document_to_dict(document: Document) -> dict:
    """Convert a parsed Document into a dict matching Document.v1.json."""
    return {
        "schema_id": "ScenarioDocument",
        "schema_version": "1.0",
        "authors": [author.id for author in document.authors],
        "scenes": [
            {
                "id": scene.id,
                "authors": [author.id for author in scene.authors],
                "branches": [
                    {
                        "id": branch.id,
                        "steps": [_step_to_dict(step) for step in branch.block],
                    }
                    for branch in scene.branches.values()
                ],
            }
            for scene in document.scenes
        ],
    }


def validate_document_dict(data: dict) -> dict:
    """Validate an exported document dict against the Document.v1.json contract.

    Returns *data* unchanged on success.
    Raises ExportError on any problem.
    """
    schema = json.loads(_DOCUMENT_SCHEMA_PATH.read_text(encoding="utf-8"))
    try:
        jsonschema.validate(data, schema)
    except jsonschema.ValidationError as exc:
        raise ExportError(f"Document violates contract schema: {exc.message}") from exc

    # Branch ids are unique per scene; JSON Schema cannot express that.
    for scene in data["scenes"]:
        ids = [branch["id"] for branch in scene["branches"]]
        if len(ids) != len(set(ids)):
            raise ExportError(f"scene {scene['id']!r} has duplicate branch ids")

    return data


def write_json(data: dict, path: str) -> None:
    """Write *data* to *path* as byte-stable, POSIX-compliant JSON.

    Keys are sorted, output is ASCII-only with Unix line endings and a single
    trailing newline.
    """
    serialized = json.dumps(data, sort_keys=True, indent=2, ensure_ascii=True)
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(serialized + "\n", encoding="utf-8", newline="\n")
