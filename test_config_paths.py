import json
import logging
import tempfile
from pathlib import Path

import config_paths


def _point_at(tmp, monkeypatch):
    cfg_dir = Path(tmp) / "tablekeep"
    cfg_dir.mkdir(parents=True, exist_ok=True)
    monkeypatch.setattr(config_paths, "CONFIG_DIR", str(cfg_dir))
    monkeypatch.setattr(config_paths, "CONFIG_JSON", str(cfg_dir / "config.json"))
    monkeypatch.setattr(config_paths, "DATA_DIR", str(Path(tmp) / "data"))
    return cfg_dir / "config.json"


def test_load_config_defaults_without_json(monkeypatch):
    with tempfile.TemporaryDirectory() as tmp:
        _point_at(tmp, monkeypatch)
        cfg = config_paths.load_config()
        assert cfg["DATA_DIR"] == str(Path(tmp) / "data")
        assert cfg["DEFAULT_COLUMN_NAME"] == "名称"
        assert cfg["LOG_LEVEL"] == "WARNING"


def test_load_config_reads_json_overrides(monkeypatch):
    with tempfile.TemporaryDirectory() as tmp:
        cfg_path = _point_at(tmp, monkeypatch)
        cfg_path.write_text(
            json.dumps(
                {
                    "data_dir": "/srv/tables",
                    "default_column_name": "Name",
                    "log_level": "debug",
                }
            )
        )
        cfg = config_paths.load_config()
        assert cfg["DATA_DIR"] == "/srv/tables"
        assert cfg["DEFAULT_COLUMN_NAME"] == "Name"
        assert cfg["LOG_LEVEL"] == "DEBUG"


def test_load_config_ignores_bad_values(monkeypatch):
    with tempfile.TemporaryDirectory() as tmp:
        cfg_path = _point_at(tmp, monkeypatch)
        cfg_path.write_text(
            json.dumps({"data_dir": 7, "default_column_name": "  ", "log_level": "LOUD"})
        )
        cfg = config_paths.load_config()
        assert cfg["DATA_DIR"] == str(Path(tmp) / "data")
        assert cfg["DEFAULT_COLUMN_NAME"] == "名称"
        assert cfg["LOG_LEVEL"] == "WARNING"


def test_load_config_survives_broken_json(monkeypatch, caplog):
    with tempfile.TemporaryDirectory() as tmp:
        cfg_path = _point_at(tmp, monkeypatch)
        cfg_path.write_text("{oops")
        with caplog.at_level(logging.WARNING):
            cfg = config_paths.load_config()
        assert cfg["LOG_LEVEL"] == "WARNING"
        assert "unreadable config" in caplog.text


def test_ensure_config_dirs_creates_data_dir(monkeypatch):
    with tempfile.TemporaryDirectory() as tmp:
        _point_at(tmp, monkeypatch)
        target = Path(tmp) / "elsewhere" / "tables"
        config_paths.ensure_config_dirs(str(target))
        assert target.is_dir()
