# Author: PB
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# tests/test_logging_setup.py

import yaml
from loguru import logger

from stowage.system.logging_setup import setup_logging


def test_explicit_local_log_writes_file(tmp_path, isolated_config_env):
    log_dir = tmp_path / "logs"
    setup_logging(local_log=log_dir)
    logger.debug("hello from the test")
    logger.remove()

    log_file = log_dir / "stowage.log"
    assert log_file.exists()
    assert "hello from the test" in log_file.read_text()


def test_local_log_from_config(tmp_path, isolated_config_env):
    log_dir = tmp_path / "configured"
    config_dir = isolated_config_env / ".config" / "stowage"
    config_dir.mkdir(parents=True)
    (config_dir / "stowage.yml").write_text(yaml.safe_dump({"local_log": str(log_dir)}))

    setup_logging()
    logger.remove()

    assert (log_dir / "stowage.log").exists()


def test_console_only_by_default(tmp_path, isolated_config_env):
    setup_logging(debug=True)
    logger.remove()
    assert not list(tmp_path.rglob("stowage.log"))


def test_broken_config_does_not_stop_logging(isolated_config_env, capsys):
    config_dir = isolated_config_env / ".config" / "stowage"
    config_dir.mkdir(parents=True)
    (config_dir / "stowage.yml").write_text("- not\n- a mapping\n")

    setup_logging()
    logger.remove()

    assert "Failed to read logging config" in capsys.readouterr().err
