"""Tests for the notevault CLI."""

import json
import os
import subprocess
import tempfile
from pathlib import Path

import pytest

KEY_HEX = "41" * 32


@pytest.fixture
def workdir():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "tmp").mkdir()
        (root / "notevault.toml").write_text(
            f'[session]\ntemp_dir = "{(root / "tmp").as_posix()}"\n'
        )
        yield root


def run(workdir, *args, key=KEY_HEX, stdin=None):
    """Run the CLI against workdir/notes.vault with the key in the environment."""
    env = dict(os.environ)
    env.pop("NOTEVAULT_KEY", None)
    if key is not None:
        env["NOTEVAULT_KEY"] = key
    return subprocess.run(
        ["notevault", "--vault", str(workdir / "notes.vault"), *args],
        capture_output=True,
        text=True,
        cwd=workdir,
        env=env,
        input=stdin if stdin is not None else "",
    )


def test_keygen():
    result = subprocess.run(["notevault", "keygen"], capture_output=True, text=True)
    assert result.returncode == 0
    key = result.stdout.strip()
    assert len(key) == 64
    int(key, 16)


def test_init_add_ls_show(workdir):
    """Test the Groceries flow end to end."""
    assert run(workdir, "init").returncode == 0
    assert (workdir / "notes.vault").exists()

    result = run(workdir, "add", "--title", "Groceries", "--content", "Milk, eggs")
    assert result.returncode == 0
    assert result.stdout.strip() == "1"

    result = run(workdir, "ls")
    assert result.returncode == 0
    assert result.stdout == "1\tGroceries\n"

    result = run(workdir, "--json", "show", "1")
    assert result.returncode == 0
    assert json.loads(result.stdout) == {
        "id": 1,
        "title": "Groceries",
        "content": "Milk, eggs",
    }

    assert list((workdir / "tmp").iterdir()) == []


def test_add_reads_stdin(workdir):
    run(workdir, "init")
    result = run(workdir, "add", "--title", "piped", stdin="from stdin\n")
    assert result.returncode == 0

    result = run(workdir, "--json", "show", "1")
    assert json.loads(result.stdout)["content"] == "from stdin\n"


def test_init_twice_fails(workdir):
    run(workdir, "init")
    result = run(workdir, "init")
    assert result.returncode == 1
    assert "already exists" in result.stderr
    assert run(workdir, "init", "--force").returncode == 0


def test_edit_keeps_unchanged_fields(workdir):
    run(workdir, "init")
    run(workdir, "add", "--title", "old", "--content", "body")

    result = run(workdir, "edit", "1", "--title", "new")
    assert result.returncode == 0

    result = run(workdir, "--json", "show", "1")
    assert json.loads(result.stdout) == {"id": 1, "title": "new", "content": "body"}


def test_edit_needs_changes(workdir):
    run(workdir, "init")
    run(workdir, "add", "--title", "a", "--content", "b")
    result = run(workdir, "edit", "1")
    assert result.returncode == 1
    assert "nothing to change" in result.stderr


def test_rm_hides_note(workdir):
    run(workdir, "init")
    run(workdir, "add", "--title", "Groceries", "--content", "Milk, eggs")

    result = run(workdir, "rm", "1", "--yes")
    assert result.returncode == 0

    result = run(workdir, "--json", "ls")
    assert json.loads(result.stdout) == []

    result = run(workdir, "show", "1")
    assert result.returncode == 1
    assert "Note 1 not found" in result.stderr


def test_ls_grep(workdir):
    run(workdir, "init")
    run(workdir, "add", "--title", "Groceries", "--content", "Milk, eggs")
    run(workdir, "add", "--title", "Todo", "--content", "call mom")

    result = run(workdir, "--json", "ls", "--grep", "milk")
    assert json.loads(result.stdout) == [{"id": 1, "title": "Groceries"}]


def test_wrong_key(workdir):
    """Test that a flipped key is reported as a decryption failure."""
    run(workdir, "init")
    run(workdir, "add", "--title", "Groceries", "--content", "Milk, eggs")

    result = run(workdir, "ls", key="40" + "41" * 31)
    assert result.returncode == 1
    assert "Decryption failed" in result.stderr
    assert "Groceries" not in result.stdout
    assert list((workdir / "tmp").iterdir()) == []


def test_missing_key(workdir):
    result = run(workdir, "init", key=None)
    assert result.returncode == 1
    assert "NOTEVAULT_KEY" in result.stderr


def test_malformed_key_flag(workdir):
    result = run(workdir, "--key", "xyz", "init", key=None)
    assert result.returncode == 1
    assert "Invalid key" in result.stderr
    assert not (workdir / "notes.vault").exists()


def test_missing_vault(workdir):
    result = run(workdir, "ls")
    assert result.returncode == 1
    assert "I/O error" in result.stderr


def test_export_import(workdir):
    """Test exporting to Markdown and importing into a second vault."""
    run(workdir, "init")
    run(workdir, "add", "--title", "Groceries", "--content", "Milk, eggs")
    run(workdir, "add", "--title", "Gone", "--content", "x")
    run(workdir, "rm", "2", "--yes")

    out = workdir / "export"
    result = run(workdir, "export", str(out))
    assert result.returncode == 0
    assert "Exported 1 notes" in result.stdout
    assert sorted(p.name for p in out.iterdir()) == ["1.md"]

    other = workdir / "other"
    other.mkdir()
    (other / "tmp").mkdir()
    assert run(other, "init").returncode == 0
    result = run(other, "--json", "import", str(out))
    assert result.returncode == 0
    assert json.loads(result.stdout) == {"imported": [1]}

    result = run(other, "--json", "show", "1")
    assert json.loads(result.stdout)["content"] == "Milk, eggs"


def test_import_missing_dir(workdir):
    run(workdir, "init")
    result = run(workdir, "import", str(workdir / "nope"))
    assert result.returncode == 1
    assert "does not exist" in result.stderr


def test_malformed_config_reports_error(workdir):
    bad = workdir / "bad.toml"
    bad.write_text("[vault\npath = \n")
    result = subprocess.run(
        ["notevault", "--config", str(bad), "keygen"],
        capture_output=True,
        text=True,
        cwd=workdir,
    )
    assert result.returncode == 1
    assert result.stderr.startswith("Error: ")
    assert "Traceback" not in result.stderr


def test_rm_without_confirmation_on_closed_stdin(workdir):
    """Test that rm aborts cleanly when no answer can be read."""
    run(workdir, "init")
    run(workdir, "add", "--title", "keep", "--content", "me")

    result = run(workdir, "rm", "1")
    assert result.returncode == 0
    assert "Aborted" in result.stdout
    assert "Traceback" not in result.stderr

    result = run(workdir, "--json", "ls")
    assert json.loads(result.stdout) == [{"id": 1, "title": "keep"}]
