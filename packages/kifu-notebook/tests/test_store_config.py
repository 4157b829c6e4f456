import json
from pathlib import Path

import pytest

from kifu_model import KifuError, MalformedRecord
from kifu_notebook import NotebookConfig, NotebookStore, RecordNotFound, TreeSession, load_config


def test_load_missing_notebook(tmp_path: Path):
    store = NotebookStore(tmp_path / "missing.json")
    assert not store.exists()
    with pytest.raises(RecordNotFound):
        store.load()
    with pytest.raises(FileNotFoundError):
        store.load()
    with pytest.raises(KifuError):
        store.load()


def test_save_then_load_preserves_key_order(tmp_path: Path, branching_record, rules):
    store = NotebookStore(tmp_path / "nested" / "notebook.json")
    session = TreeSession.from_record(branching_record, rules).apply_move("d2d4")
    store.save(session.to_record())

    loaded = store.load()
    assert loaded == session.to_record()
    assert list(loaded) == ["header", "moves"]
    assert list(loaded["moves"][1]) == ["comments", "move", "time", "forks"]
    assert not (tmp_path / "nested" / "notebook.json.tmp").exists()
    assert TreeSession.from_record(loaded, rules).root.children[2].display_text == "1. d4"


def test_save_keeps_unicode_and_indent(tmp_path: Path):
    store = NotebookStore(tmp_path / "n.json", indent=4)
    store.save({"header": {"Event": "Турнир"}, "moves": [{}]})
    text = (tmp_path / "n.json").read_text(encoding="utf-8")
    assert "Турнир" in text
    assert '\n    "header"' in text


def test_load_rejects_invalid_json(tmp_path: Path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(MalformedRecord, match="broken.json"):
        NotebookStore(path).load()


def test_load_rejects_non_object(tmp_path: Path):
    path = tmp_path / "list.json"
    path.write_text(json.dumps([1, 2]), encoding="utf-8")
    with pytest.raises(MalformedRecord, match="JSON object"):
        NotebookStore(path).load()


def test_load_config_defaults():
    assert load_config(env={}) == NotebookConfig()


def test_load_config_env_and_options():
    env = {
        "KIFU_NOTEBOOK_PATH": "/data/study.json",
        "KIFU_NOTEBOOK_INDENT": "0",
        "KIFU_NOTEBOOK_LOG_LEVEL": "debug",
    }
    config = load_config(env=env)
    assert config == NotebookConfig(path="/data/study.json", indent=None, log_level="DEBUG")

    config = load_config({"path": "other.json", "log_level": None}, env=env)
    assert config.path == "other.json"
    assert config.log_level == "DEBUG"


def test_store_from_config():
    store = NotebookStore.from_config(NotebookConfig(path="a/b.json", indent=3))
    assert store.path == Path("a/b.json")
    assert store.indent == 3


def test_failed_save_leaves_old_file_and_no_temp(tmp_path: Path, monkeypatch):
    store = NotebookStore(tmp_path / "n.json")
    store.save({"header": {}, "moves": [{}]})
    before = store.path.read_text(encoding="utf-8")

    def fail(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("kifu_notebook.store.os.replace", fail)
    with pytest.raises(OSError, match="disk full"):
        store.save({"header": {"Event": "new"}, "moves": [{}]})
    assert store.path.read_text(encoding="utf-8") == before
    assert not (tmp_path / "n.json.tmp").exists()


def test_unserializable_record_is_not_written(tmp_path: Path):
    store = NotebookStore(tmp_path / "n.json")
    with pytest.raises(TypeError):
        store.save({"header": {}, "moves": [{}], "extra": {1, 2}})
    assert list(tmp_path.iterdir()) == []


@pytest.mark.parametrize("indent", ["abc", "2.5"])
def test_load_config_rejects_bad_indent(indent):
    with pytest.raises(ValueError, match="indent"):
        load_config(env={"KIFU_NOTEBOOK_INDENT": indent})


def test_load_config_rejects_unknown_log_level():
    with pytest.raises(ValueError, match="log_level"):
        load_config({"log_level": "chatty"}, env={})
