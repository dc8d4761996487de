import json
import logging

import pytest

from transcribe_api.logging import SERVICE_NAME, setup_logging


@pytest.fixture(autouse=True)
def restore_logging(monkeypatch: pytest.MonkeyPatch):
    yield
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    setup_logging()


def test_level_follows_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "warning")

    root = setup_logging()

    assert root is logging.getLogger()
    assert root.level == logging.WARNING
    uvicorn_access = logging.getLogger("uvicorn.access")
    assert uvicorn_access.level == logging.WARNING
    assert uvicorn_access.propagate is False
    assert uvicorn_access.handlers == root.handlers


def test_unknown_level_falls_back_to_info(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "chatty")

    assert setup_logging().level == logging.INFO


def test_handler_is_shared_across_calls() -> None:
    first = setup_logging().handlers
    second = setup_logging().handlers

    assert len(second) == 1
    assert first[0] is second[0]


def test_records_are_json_with_service_and_extra_fields() -> None:
    handler = setup_logging().handlers[0]
    record = logging.LogRecord(
        name="transcribe_api.handlers.cleanup",
        level=logging.ERROR,
        pathname=__file__,
        lineno=1,
        msg="Staged object could not be deleted",
        args=None,
        exc_info=None,
    )
    record.object_name = "staging/a/voice.mp3"

    payload = json.loads(handler.format(record))

    assert payload["service"] == SERVICE_NAME
    assert payload["levelname"] == "ERROR"
    assert payload["message"] == "Staged object could not be deleted"
    assert payload["object_name"] == "staging/a/voice.mp3"
