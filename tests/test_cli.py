# ==============================================
# Tests for the CLI
# ==============================================

import json

import pytest

from backedstore.cli import build_parser, main


@pytest.fixture(autouse=True)
def no_default_path(monkeypatch):
    monkeypatch.delenv("BACKEDSTORE_PATH", raising=False)


def read_json(path):
    return json.loads(path.read_text(encoding="utf-8"))


def test_set_creates_file(store_path, capsys):
    assert main(["--path", str(store_path), "set", "alice", '{"visits": 1}']) == 0
    assert read_json(store_path) == {"alice": {"visits": 1}}
    assert capsys.readouterr().err == ""


def test_show_and_keys(store_path, capsys):
    store_path.write_text(json.dumps({"b": {"n": 2}, "a": {"n": 1}}), encoding="utf-8")

    assert main(["--path", str(store_path), "show"]) == 0
    assert json.loads(capsys.readouterr().out) == {"a": {"n": 1}, "b": {"n": 2}}

    assert main(["--path", str(store_path), "keys"]) == 0
    assert capsys.readouterr().out.split() == ["a", "b"]


def test_get(store_path, capsys):
    store_path.write_text(json.dumps({"a": {"nest": {"x": 1}}}), encoding="utf-8")
    assert main(["--path", str(store_path), "get", "a"]) == 0
    assert json.loads(capsys.readouterr().out) == {"nest": {"x": 1}}


def test_get_missing_key(store_path, capsys):
    store_path.write_text("{}", encoding="utf-8")
    assert main(["--path", str(store_path), "get", "nope"]) == 2
    assert "no such key" in capsys.readouterr().err


def test_read_commands_do_not_write(store_path):
    assert main(["--path", str(store_path), "show"]) == 1
    assert not store_path.exists()


def test_delete(store_path):
    store_path.write_text(json.dumps({"a": {}, "b": {}}), encoding="utf-8")
    assert main(["--path", str(store_path), "delete", "a"]) == 0
    assert read_json(store_path) == {"b": {}}


def test_set_refuses_to_overwrite_corrupt_file(store_path, capsys):
    store_path.write_text("{broken", encoding="utf-8")
    assert main(["--path", str(store_path), "set", "a", "{}"]) == 1
    assert store_path.read_text(encoding="utf-8") == "{broken"
    assert "format" in capsys.readouterr().err


def test_invalid_json_value(store_path, capsys):
    assert main(["--path", str(store_path), "set", "a", "{nope"]) == 2
    assert not store_path.exists()


def test_no_path(capsys, monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    assert main(["show"]) == 2
    assert "no store path" in capsys.readouterr().err


def test_path_from_environment(store_path, monkeypatch):
    monkeypatch.setenv("BACKEDSTORE_PATH", str(store_path))
    assert main(["set", "k", '{"v": true}']) == 0
    assert read_json(store_path) == {"k": {"v": True}}


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])
