import importlib
import sys


def _fresh_paths():
    sys.modules.pop("env.paths", None)
    return importlib.import_module("env.paths")


def test_paths_respect_env_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("UPLOADARR_LOGS_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("UPLOADARR_AUTH_DIR", str(tmp_path / "auth"))
    monkeypatch.setenv("UPLOADARR_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("UPLOADARR_OUT_DIR", str(tmp_path / "out"))

    paths = _fresh_paths()

    assert paths.LOGS_DIR == (tmp_path / "logs").resolve()
    assert paths.AUTH_DIR.exists()
    assert paths.DATA_DIR.exists()
    assert paths.OUT_DIR.exists()


def test_file_helpers(tmp_path, monkeypatch):
    monkeypatch.setenv("UPLOADARR_AUTH_DIR", str(tmp_path / "auth"))
    monkeypatch.setenv("UPLOADARR_DATA_DIR", str(tmp_path / "data"))

    paths = _fresh_paths()

    assert paths.auth_token_file().name == "oauth_token.json"
    assert paths.auth_client_secrets_file().parent == paths.AUTH_DIR
    assert paths.data_file("upload-state.json").parent == paths.DATA_DIR


def test_command_logs_dir_rereads_override(tmp_path, monkeypatch):
    monkeypatch.setenv("UPLOADARR_LOGS_DIR", str(tmp_path / "late"))

    from logger.log_paths import command_logs_dir

    path = command_logs_dir("upload")

    assert path.exists()
    assert path.parent == (tmp_path / "late").resolve()
