import os
from dataclasses import dataclass

import pytest

from ridge.infra.persist import load_json, save_json, state_dir


@pytest.fixture
def fake_home(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    return home


def test_state_dir(fake_home):
    directory = state_dir("test-server")
    assert directory == str(fake_home / ".mcp-context" / "test-server")
    assert os.path.isdir(directory)


def test_state_dir_is_idempotent(fake_home):
    first = state_dir("srv")
    second = state_dir("srv")
    assert first == str(fake_home / ".mcp-context" / "srv")
    assert second == first


def test_load_save_json(tmp_path):
    path = tmp_path / "test.json"
    save_json(path, {"name": "hello", "count": 42})
    assert load_json(path) == {"name": "hello", "count": 42}


def test_save_json_dataclass(tmp_path):
    @dataclass
    class Data:
        name: str
        count: int

    path = tmp_path / "data.json"
    save_json(path, Data(name="hello", count=42))
    assert load_json(path) == {"name": "hello", "count": 42}


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_json(tmp_path / "missing.json")


def test_load_malformed_file(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError, match="parsing bad.json"):
        load_json(path)


def test_save_json_creates_parent_dirs(tmp_path):
    path = tmp_path / "a" / "b" / "c" / "test.json"
    save_json(path, {"X": 1})
    assert path.is_file()
    assert load_json(path) == {"X": 1}


def test_save_json_is_indented(tmp_path):
    path = tmp_path / "out.json"
    save_json(path, {"a": 1})
    assert path.read_text(encoding="utf-8") == '{\n  "a": 1\n}'