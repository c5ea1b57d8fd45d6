from __future__ import annotations

# shelter/config.py
import os
import yaml

# Resolution order for every setting:
# 1) environment variable (highest priority)
# 2) config.yaml test key, when running under pytest / APP_ENV=test
# 3) config.yaml key
# 4) default under the project root
_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
_CONFIG_KEYS = (
    "db_path",
    "test_db_path",
    "auth_db_path",
    "test_auth_db_path",
    "files_root",
    "log_level",
)


def read_config_yaml() -> dict:
    cfg_path = os.path.join(_PROJECT_ROOT, "config.yaml")
    if not os.path.exists(cfg_path):
        return {}
    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return {}
    out = {}
    for k in _CONFIG_KEYS:
        v = cfg.get(k)
        if isinstance(v, str) and v.strip():
            out[k] = v.strip()
    return out


def _is_test() -> bool:
    return (os.environ.get("APP_ENV") == "test") or (os.environ.get("PYTEST_CURRENT_TEST") is not None)


def _resolve(env_var: str, key: str, test_key: str | None, default_name: str) -> str:
    env_path = os.environ.get(env_var)
    cfg = read_config_yaml()
    if env_path:
        return env_path
    if test_key and _is_test() and cfg.get(test_key):
        name = cfg[test_key]
    else:
        name = cfg.get(key) or default_name
    return name if os.path.isabs(name) else os.path.join(_PROJECT_ROOT, name)


def _ensure_parent(path: str) -> str:
    dirn = os.path.dirname(path) or "."
    os.makedirs(dirn, exist_ok=True)
    return path


def get_db_path() -> str:
    """Shelter records database (animals, adoption requests, operation log)."""
    return _ensure_parent(_resolve("SHELTER_DB_PATH", "db_path", "test_db_path", "shelter.db"))


def get_auth_db_path() -> str:
    """Credentials database, kept in its own file."""
    return _ensure_parent(_resolve("SHELTER_AUTH_DB_PATH", "auth_db_path", "test_auth_db_path", "auth.db"))


def get_files_root() -> str:
    return _resolve("SHELTER_FILES_ROOT", "files_root", None, "files")


def get_log_level() -> str:
    level = os.environ.get("SHELTER_LOG_LEVEL") or read_config_yaml().get("log_level") or "INFO"
    return level.upper()
