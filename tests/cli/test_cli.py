"""Tests for the command line entry point."""

import json
import subprocess
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).parent.parent.parent

TREE = [
    {"name": "age", "kind": "number", "width": "half", "required": True},
    {
        "name": "license",
        "kind": "boolean",
        "width": "half",
        "visibility": {"field": "age", "operator": "greaterThan", "value": 18},
    },
]


def _run(*args: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, ".", *args],
        capture_output=True,
        text=True,
        cwd=PROJECT_ROOT,
        timeout=60,
    )


@pytest.fixture
def tree_file(tmp_path: Path) -> Path:
    path = tmp_path / "form.json"
    path.write_text(json.dumps(TREE))
    return path


@pytest.mark.integration
class TestDocumentCommands:
    """compile / parse / validate / tree."""

    def test_compile(self, tree_file):
        """compile prints the document pair."""
        result = _run("compile", str(tree_file))
        assert result.returncode == 0, result.stderr
        documents = json.loads(result.stdout)
        assert documents["schema"]["required"] == ["age"]
        row = documents["uiSchema"]["elements"][0]
        assert row["type"] == "HorizontalLayout"
        assert row["elements"][1]["rule"]["effect"] == "SHOW"

    def test_compile_then_parse(self, tree_file, tmp_path):
        """parse reads compiled documents back into a tree."""
        documents = tmp_path / "documents.json"
        assert _run("compile", str(tree_file), "-o", str(documents)).returncode == 0

        result = _run("parse", str(documents))
        assert result.returncode == 0, result.stderr
        nodes = json.loads(result.stdout)
        assert [node["name"] for node in nodes] == ["age", "license"]
        assert nodes[1]["visibility"]["operator"] == "greaterThan"

    def test_validate_reports_problems(self, tmp_path):
        """validate exits 1 for a tree with a dangling condition."""
        path = tmp_path / "bad.json"
        path.write_text(
            json.dumps(
                {"fields": [{"name": "a", "kind": "string", "visibility": {"field": "ghost"}}]}
            )
        )
        result = _run("validate", str(path))
        assert result.returncode == 1
        assert "dangling_condition" in result.stderr

    def test_compile_warns_once(self, tmp_path):
        """Each compilation warning is logged a single time."""
        path = tmp_path / "dangling.json"
        path.write_text(
            json.dumps([{"name": "a", "kind": "string", "visibility": {"field": "ghost"}}])
        )
        result = _run("compile", str(path))
        assert result.returncode == 0, result.stderr
        assert result.stderr.count("references missing field") == 1

    def test_tree(self, tree_file):
        """tree renders the text view."""
        result = _run("tree", str(tree_file))
        assert result.returncode == 0, result.stderr
        assert "age" in result.stdout
        assert "50%" in result.stdout

    def test_missing_file(self, tmp_path):
        """Unreadable input is an error, not a crash."""
        result = _run("compile", str(tmp_path / "missing.json"))
        assert result.returncode == 1
        assert "Compilation failed" in result.stderr


@pytest.mark.integration
class TestFormCommands:
    """templates / forms."""

    def test_templates_list(self):
        """templates lists the built-in templates."""
        result = _run("templates", "list")
        assert result.returncode == 0
        assert "registration" in result.stderr

    def test_unknown_template(self):
        """Unknown template IDs fail."""
        assert _run("templates", "show", "nope").returncode == 1

    def test_save_list_delete(self, tree_file):
        """Forms can be saved, listed and deleted."""
        saved = _run("forms", "save", str(tree_file), "--name", "Licence")
        assert saved.returncode == 0, saved.stderr
        form_id = saved.stderr.strip().splitlines()[-1].rsplit(" ", 1)[-1]

        listed = _run("forms", "list")
        assert "Licence" in listed.stderr

        shown = _run("forms", "show", form_id)
        assert shown.returncode == 0
        assert json.loads(shown.stdout)["schema"]["required"] == ["age"]

        assert _run("forms", "delete", form_id).returncode == 0
        assert _run("forms", "delete", form_id).returncode == 1

    def test_unknown_command(self):
        """Unknown commands print help and fail."""
        result = _run("frobnicate")
        assert result.returncode == 1
        assert "Usage" in result.stdout
