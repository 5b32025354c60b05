# ReqresSync test scripts
from __future__ import annotations

import json
from pathlib import Path

from rs_platform import config_base as cb


def test_defaults_when_no_file(config_base: Path) -> None:
    cfg = cb.load_config()
    assert cfg["reqres"]["max_retries"] == 3
    assert cfg["reqres"]["retry_delay_ms"] == 2000
    assert cb.config_path() == config_base / "config.json"
    assert cb.db_path(cfg) == config_base / "user-database.sqlite"


def test_user_values_merge_and_normalize(config_base: Path) -> None:
    (config_base / "config.json").write_text(
        json.dumps({"reqres": {"base_url": "http://localhost:9000/", "max_retries": -2, "retry_delay_ms": "250"},
                    "storage": {"db_name": "cache.db"}}),
        encoding="utf-8",
    )
    cfg = cb.load_config()
    assert cfg["reqres"]["base_url"] == "http://localhost:9000"
    assert cfg["reqres"]["max_retries"] == 0
    assert cfg["reqres"]["retry_delay_ms"] == 250
    assert cfg["reqres"]["timeout"] == 10.0
    assert cb.db_path(cfg) == config_base / "cache.db"


def test_broken_file_falls_back_to_defaults(config_base: Path) -> None:
    (config_base / "config.json").write_text("{nope", encoding="utf-8")
    assert cb.load_config()["server"]["port"] == 8788


def test_save_config_is_readable_back(config_base: Path) -> None:
    cfg = cb.load_config()
    cfg["reqres"]["max_retries"] = 5
    cfg["runtime"]["debug"] = True
    cb.save_config(cfg)

    again = cb.load_config()
    assert again["reqres"]["max_retries"] == 5
    assert again["runtime"]["debug"] is True
    assert not list(config_base.glob("*.tmp"))
