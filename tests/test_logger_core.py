import logging


def test_logger_creates_command_log(tmp_path, monkeypatch):
    monkeypatch.setenv("UPLOADARR_LOGS_DIR", str(tmp_path))
    monkeypatch.setenv("UPLOADARR_COMMAND", "upload")
    monkeypatch.setenv("UPLOADARR_RUN_ID", "2026-03-02_10-00-00")

    from logger import init_logging, get_logger

    init_logging()
    get_logger("test").info("hello")

    logs = list(tmp_path.rglob("*.log"))
    assert len(logs) == 1
    assert logs[0].name == "upload-2026-03-02_10-00-00.log"
    assert logs[0].parent.name == "upload"


def test_file_handler_is_repointed_not_stacked(tmp_path, monkeypatch):
    monkeypatch.setenv("UPLOADARR_LOGS_DIR", str(tmp_path))
    monkeypatch.setenv("UPLOADARR_QUIET", "1")

    from logger import init_logging

    monkeypatch.setenv("UPLOADARR_COMMAND", "status")
    init_logging()
    monkeypatch.setenv("UPLOADARR_COMMAND", "upload")
    init_logging()

    file_handlers = [
        h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)
    ]
    assert len(file_handlers) == 1
    assert "upload" in file_handlers[0].baseFilename


def test_log_line_format(tmp_path, monkeypatch):
    monkeypatch.setenv("UPLOADARR_LOGS_DIR", str(tmp_path))
    monkeypatch.setenv("UPLOADARR_COMMAND", "report")
    monkeypatch.setenv("UPLOADARR_QUIET", "1")

    from logger import init_logging, get_logger

    init_logging()
    get_logger("pipeline.upload").warning("quota low")
    for h in logging.getLogger().handlers:
        h.flush()

    text = next(tmp_path.rglob("*.log")).read_text(encoding="utf-8")
    assert "| [WARNING] | pipeline.upload | quota low" in text
