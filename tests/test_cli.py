import json
import sys

import pytest
from click.testing import CliRunner

from promptpack.cli import main

APP = """\
import os

def main():
    print(os.getcwd())

main()
"""

NOTEBOOK = {
    "cells": [
        {"cell_type": "markdown", "source": "# Demo"},
        {"cell_type": "code", "source": "x = 1", "outputs": []},
    ],
    "metadata": {},
    "nbformat": 4,
    "nbformat_minor": 5,
}


@pytest.fixture
def project(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    # tiktoken downloads its encodings on first use
    monkeypatch.setattr(sys.modules["promptpack.cli.main"], "len_tokens", lambda text: len(text.split()))
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "app.py").write_text(APP)
    (tmp_path / "demo.ipynb").write_text(json.dumps(NOTEBOOK))
    return tmp_path


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def test_pack(project, runner):
    result = runner.invoke(main, ["pack", "src", "demo.ipynb", "--goal", "Explain"])
    assert result.exit_code == 0, result.output
    assert "TREE\n" in result.output
    assert "FILE src/app.py SKELETON\n" in result.output
    assert "FILE demo.ipynb/Cell 1 MARKDOWN\n# Demo\nEND_FILE" in result.output
    assert "FILE demo.ipynb/Cell 2 SKELETON\nx = 1\n" in result.output
    assert "GOAL\nExplain\n" in result.output
    assert "Packed 3 cells (0 full, 3 compressed)" in result.output


def test_verbose_is_a_global_option(project, runner):
    result = runner.invoke(main, ["-v", "pack", "src"])
    assert result.exit_code == 0, result.output
    assert "FILE src/app.py SKELETON" in result.output


def test_pack_full_and_no_tree(project, runner):
    result = runner.invoke(main, ["pack", "src", "--full", "src/*.py", "--no-tree"])
    assert result.exit_code == 0, result.output
    assert "TREE" not in result.output
    assert f"FILE src/app.py FULL\n{APP}\nEND_FILE" in result.output
    assert "(1 full, 0 compressed)" in result.output


def test_pack_to_file(project, runner):
    result = runner.invoke(main, ["pack", "src", "-o", "prompt.txt"])
    assert result.exit_code == 0, result.output
    assert "FILE src/app.py SKELETON" in (project / "prompt.txt").read_text()


def test_pack_uses_workspace_config(project, runner):
    (project / "promptpack.toml").write_text('preamble = "Be brief."\ninclude_tree = false\n')
    result = runner.invoke(main, ["pack", "src"])
    assert result.exit_code == 0, result.output
    assert "PREAMBLE\nBe brief.\n\n" in result.output
    assert "TREE" not in result.output


def test_invalid_config(project, runner):
    (project / "promptpack.toml").write_text("goal = [\n")
    result = runner.invoke(main, ["pack", "src"])
    assert result.exit_code == 1
    assert "Failed to load config" in result.output


def test_skeleton(project, runner):
    result = runner.invoke(main, ["skeleton", "demo.ipynb"])
    assert result.exit_code == 0, result.output
    assert "FILE demo.ipynb/Cell 2 SKELETON\nx = 1\n" in result.output
    assert "MARKDOWN" not in result.output
    assert "TREE" not in result.output


def test_skeleton_without_code(project, runner):
    (project / "notes.md").write_text("# Notes")
    result = runner.invoke(main, ["skeleton", "notes.md"])
    assert result.exit_code == 1
    assert "No code cells" in result.output


def test_diff(project, runner):
    (project / "old.py").write_text("x = 1\ny = 2")
    (project / "new.py").write_text("x = 1\ny = 3")
    result = runner.invoke(main, ["diff", "old.py", "new.py", "--unified"])
    assert result.exit_code == 0, result.output
    assert "#### new.py ####" in result.output
    assert "  x = 1\n- y = 2\n+ y = 3\n" in result.output


def test_diff_without_changes(project, runner):
    (project / "old.py").write_text("x = 1")
    (project / "new.py").write_text("x = 1")
    result = runner.invoke(main, ["diff", "old.py", "new.py"])
    assert result.exit_code == 0
    assert "No changes." in result.output
    assert "CHANGES MADE" not in result.output
