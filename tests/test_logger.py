def test_logger_creates_file(tmp_path, monkeypatch):
    monkeypatch.setenv("UPLOADARR_LOGS_DIR", str(tmp_path))
    monkeypatch.setenv("UPLOADARR_COMMAND", "auth")

    from logger import init_logging, get_logger

    init_logging()
    get_logger("test").info("hello")

    assert any(tmp_path.rglob("*.log"))


def test_current_log_file_tracks_command(tmp_path, monkeypatch):
    monkeypatch.setenv("UPLOADARR_LOGS_DIR", str(tmp_path))
    monkeypatch.setenv("UPLOADARR_COMMAND", "upload")
    monkeypatch.setenv("UPLOADARR_QUIET", "1")

    from logger import current_log_file, init_logging

    assert current_log_file() is None

    init_logging()

    assert current_log_file() == (tmp_path / "upload").resolve() / current_log_file().name
    assert current_log_file().exists()
