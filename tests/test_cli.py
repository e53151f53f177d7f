"""
joman - Command line tests.

Drives ``joman.cli.main`` in-process and checks output and exit status.
"""

import subprocess
import zipfile
from pathlib import Path

import pytest

from joman import __version__, logic
from joman.cli import main


def run(root, *argv):
    return main(["-C", str(root), *argv])


def test_init(tmp_path, capsys):
    assert run(tmp_path, "init") == 0

    out = capsys.readouterr().out
    assert "Journal directory initialized! key saved as" in out
    assert "private.pem" in out
    assert (tmp_path / "Journal" / "public.pem").exists()


def test_init_twice_fails(tmp_path, capsys):
    run(tmp_path, "init")
    capsys.readouterr()

    assert run(tmp_path, "init") == 1

    assert "error: Journal already initialized" in capsys.readouterr().err


def test_add_then_read(tmp_path, capsys):
    run(tmp_path, "init")
    src = tmp_path / "today.txt"
    src.write_text("hello journal")

    assert run(tmp_path, "add", str(src)) == 0
    assert run(tmp_path, "read", str(tmp_path / "Journal" / "today.txt.enc"),
               str(tmp_path / "private.pem")) == 0

    out = capsys.readouterr().out
    assert "Added today.txt.enc" in out
    assert out.rstrip().endswith("hello journal")


def test_add_collision_and_force(tmp_path, capsys):
    run(tmp_path, "init")
    src = tmp_path / "today.txt"
    src.write_text("v1")
    run(tmp_path, "add", str(src))

    assert run(tmp_path, "add", str(src)) == 1
    assert run(tmp_path, "add", "--force", str(src)) == 0


def test_load_directory(tmp_path, capsys):
    run(tmp_path, "init")
    drafts = tmp_path / "drafts"
    drafts.mkdir()
    (drafts / "a.txt").write_text("a")
    (drafts / "b.txt").write_text("b")

    assert run(tmp_path, "load", str(drafts)) == 0

    assert "Loaded 2 entries" in capsys.readouterr().out


def test_read_with_wrong_key(tmp_path, other_keypair, capsys):
    run(tmp_path, "init")
    logic.add_text(tmp_path, "secret", title="s")
    wrong = tmp_path / "wrong.pem"
    wrong.write_text(other_keypair[0])
    capsys.readouterr()

    assert run(tmp_path, "read", "s.enc", str(wrong)) == 1

    err = capsys.readouterr().err
    assert err.startswith("error: ")
    assert "secret" not in err


def test_new_with_editor(tmp_path, monkeypatch, capsys):
    run(tmp_path, "init")

    def editor(argv, *args, **kwargs):
        Path(argv[-1]).write_text("from the editor")
        return subprocess.CompletedProcess(argv, 0)

    monkeypatch.setattr(logic.subprocess, "run", editor)

    assert run(tmp_path, "new", "--editor", "true", "evening") == 0

    assert "Saved evening.enc" in capsys.readouterr().out
    key = tmp_path / "private.pem"
    assert logic.read_entry(tmp_path, "evening.enc", key) == "from the editor"


def test_list_and_zip(tmp_path, capsys):
    run(tmp_path, "init")
    logic.add_text(tmp_path, "one", title="first")
    capsys.readouterr()

    assert run(tmp_path, "list") == 0
    assert "first.enc" in capsys.readouterr().out

    assert run(tmp_path, "zip") == 0
    assert "Journal directory zipped to Journal.zip" in capsys.readouterr().out
    with zipfile.ZipFile(tmp_path / "Journal.zip") as zf:
        assert "Journal/first.enc" in zf.namelist()


def test_commands_before_init(tmp_path, capsys):
    assert run(tmp_path, "list") == 1
    assert "not initialized" in capsys.readouterr().err


def test_subcommand_required(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert excinfo.value.code == 2


def test_version(capsys):
    with pytest.raises(SystemExit):
        main(["--version"])
    assert __version__ in capsys.readouterr().out


def test_corrupt_config_reported_not_raised(tmp_path, isolated_config, capsys):
    config = isolated_config / "joman" / "config.json"
    config.parent.mkdir(parents=True, exist_ok=True)
    config.write_text("{broken")

    assert run(tmp_path, "list") == 1

    assert "error: Invalid config file" in capsys.readouterr().err


def test_help_states_padding_compatibility(capsys):
    with pytest.raises(SystemExit):
        main(["--help"])

    out = capsys.readouterr().out
    assert "RSA-OAEP" in out
    assert "cannot be read by 0.3.x" in out
