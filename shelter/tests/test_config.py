import os

from shelter import config


def test_env_var_wins(monkeypatch, tmp_path):
    monkeypatch.setenv("SHELTER_DB_PATH", str(tmp_path / "x" / "records.db"))
    assert config.get_db_path() == str(tmp_path / "x" / "records.db")
    assert (tmp_path / "x").is_dir()


def test_yaml_test_key_used_under_pytest(monkeypatch):
    monkeypatch.delenv("SHELTER_AUTH_DB_PATH", raising=False)
    monkeypatch.setattr(config, "read_config_yaml", lambda: {"auth_db_path": "a.db", "test_auth_db_path": "t.db"})
    assert config.get_auth_db_path() == os.path.join(config._PROJECT_ROOT, "t.db")


def test_default_under_project_root(monkeypatch):
    monkeypatch.delenv("SHELTER_FILES_ROOT", raising=False)
    monkeypatch.setattr(config, "read_config_yaml", lambda: {})
    assert config.get_files_root() == os.path.join(config._PROJECT_ROOT, "files")


def test_log_level_is_upper_cased(monkeypatch):
    monkeypatch.setenv("SHELTER_LOG_LEVEL", "debug")
    assert config.get_log_level() == "DEBUG"
