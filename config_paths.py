import json
import logging
import os

HOME = os.path.expanduser("~")
XDG_CONFIG_HOME = os.environ.get("XDG_CONFIG_HOME")
XDG_DATA_HOME = os.environ.get("XDG_DATA_HOME")
CONFIG_HOME = XDG_CONFIG_HOME if XDG_CONFIG_HOME else os.path.join(HOME, ".config")
DATA_HOME = XDG_DATA_HOME if XDG_DATA_HOME else os.path.join(HOME, ".local", "share")
CONFIG_DIR = os.path.join(CONFIG_HOME, "tablekeep")
CONFIG_JSON = os.path.join(CONFIG_DIR, "config.json")
DATA_DIR = os.path.join(DATA_HOME, "tablekeep", "tables")

# default settings
DEFAULT_COLUMN_NAME_DEFAULT = "名称"
LOG_LEVEL_DEFAULT = "WARNING"
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR"}

logger = logging.getLogger(__name__)


def ensure_config_dirs(data_dir: str | None = None):
    os.makedirs(CONFIG_DIR, exist_ok=True)
    os.makedirs(data_dir or DATA_DIR, exist_ok=True)


def load_config():
    cfg = {
        "DATA_DIR": DATA_DIR,
        "DEFAULT_COLUMN_NAME": DEFAULT_COLUMN_NAME_DEFAULT,
        "LOG_LEVEL": LOG_LEVEL_DEFAULT,
    }

    if not os.path.exists(CONFIG_JSON):
        return cfg

    try:
        with open(CONFIG_JSON, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", CONFIG_JSON, exc)
        return cfg

    if not isinstance(data, dict):
        logger.warning("Ignoring config %s: top level must be an object", CONFIG_JSON)
        return cfg

    data_dir = data.get("data_dir")
    if isinstance(data_dir, str) and data_dir.strip():
        cfg["DATA_DIR"] = os.path.expanduser(data_dir.strip())

    col_name = data.get("default_column_name")
    if isinstance(col_name, str) and col_name.strip():
        cfg["DEFAULT_COLUMN_NAME"] = col_name.strip()

    level = data.get("log_level")
    if isinstance(level, str) and level.strip().upper() in LOG_LEVELS:
        cfg["LOG_LEVEL"] = level.strip().upper()

    return cfg


def configure_logging(level: str = LOG_LEVEL_DEFAULT):
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )
