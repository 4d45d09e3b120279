import json
import logging
import os
from pathlib import Path

from curl_transcoder import SHELL_POSIX, SHELL_WINDOWS

CONFIG_FILENAME = ".curl_transcoder_config.json"
SHELL_CHOICES = ("auto", SHELL_POSIX, SHELL_WINDOWS)
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"

logger = logging.getLogger(__name__)


def default_config_path() -> Path: return Path.home() / CONFIG_FILENAME


def default_config():
    return {"shell_flavor": "auto", "log_level": "WARNING", "snippet_timeout": 30, "version": 1}


def load_json(path, default):
    try:
        if os.path.exists(path):
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Failed to load %s; using defaults: %s", path, e)
    return default


def save_json(path, data):
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def load_config(path=None) -> dict:
    """Read the settings file, falling back to defaults key by key."""
    path = path or default_config_path()
    cfg = default_config()
    data = load_json(path, {})
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: expected a JSON object", path)
        data = {}
    cfg.update(data)
    if cfg.get("shell_flavor") not in SHELL_CHOICES:
        logger.warning("Unknown shell_flavor %r; using 'auto'", cfg.get("shell_flavor"))
        cfg["shell_flavor"] = "auto"
    if not isinstance(logging.getLevelName(str(cfg.get("log_level")).upper()), int):
        logger.warning("Unknown log_level %r; using WARNING", cfg.get("log_level"))
        cfg["log_level"] = "WARNING"
    try:
        timeout = int(cfg.get("snippet_timeout"))
    except (TypeError, ValueError):
        timeout = 0
    if timeout <= 0:
        logger.warning("Invalid snippet_timeout %r; using 30", cfg.get("snippet_timeout"))
        timeout = 30
    cfg["snippet_timeout"] = timeout
    return cfg


def save_config(cfg: dict, path=None):
    save_json(path or default_config_path(), cfg)


def configure_logging(level="WARNING"):
    logging.basicConfig(level=str(level).upper(), format=LOG_FORMAT)
