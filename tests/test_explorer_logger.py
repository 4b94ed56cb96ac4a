import logging

import explorer.logger as logger


def test_silent_mode_suppresses_info_but_not_always(monkeypatch, caplog):
    monkeypatch.setattr(logger, "is_silent_mode", lambda: True)
    caplog.set_level(logging.INFO, logger=logger.LOGGER_NAME)

    logger.info("hidden")
    logger.info("shown", always=True)
    logger.error("failure")

    messages = [r.getMessage() for r in caplog.records]
    assert "hidden" not in messages
    assert "shown" in messages
    assert "failure" in messages


def test_debug_ctx_is_noop_without_debug_mode(monkeypatch, capsys, caplog):
    monkeypatch.setattr(logger, "is_debug_mode", lambda: False)
    caplog.set_level(logging.DEBUG, logger=logger.LOGGER_NAME)

    logger.debug_ctx("movies", "nothing to see")

    assert caplog.records == []
    assert capsys.readouterr().out == ""


def test_debug_ctx_goes_to_progress_when_silent(monkeypatch, capsys):
    monkeypatch.setattr(logger, "is_debug_mode", lambda: True)
    monkeypatch.setattr(logger, "is_silent_mode", lambda: True)

    logger.debug_ctx("movies", "page=1")

    assert capsys.readouterr().out == "[MOVIES][DEBUG] page=1\n"


def test_progressf_tolerates_bad_format(capsys):
    logger.progressf("%d items", "x")
    logger.progressf("%d items", 3)

    assert capsys.readouterr().out == "%d items\n3 items\n"


def test_resolve_level_from_config(monkeypatch):
    monkeypatch.setattr(logger, "_safe_get_cfg", lambda: object())
    monkeypatch.setattr(logger, "_cfg_str", lambda name, default=None: "warning")
    assert logger._resolve_level_from_config() == logging.WARNING

    monkeypatch.setattr(logger, "_cfg_str", lambda name, default=None: None)
    monkeypatch.setattr(logger, "is_debug_mode", lambda: True)
    assert logger._resolve_level_from_config() == logging.DEBUG


def test_debug_respects_silent_mode(monkeypatch, caplog):
    monkeypatch.setattr(logger, "_resolve_level_from_config", lambda: logging.DEBUG)
    monkeypatch.setattr(logger, "is_silent_mode", lambda: False)
    caplog.set_level(logging.DEBUG, logger=logger.LOGGER_NAME)

    logger.debug("visible detail")
    monkeypatch.setattr(logger, "is_silent_mode", lambda: True)
    logger.debug("silenced detail")

    messages = [r.getMessage() for r in caplog.records]
    assert "visible detail" in messages
    assert "silenced detail" not in messages
