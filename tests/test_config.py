import pytest
from pydantic import ValidationError
from unittest.mock import patch

from handler_chain import run
from handler_chain.config import Settings
from handler_chain.emitters import MemoryTraceEmitter

# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def test_defaults(monkeypatch):
    for var in (
        "HANDLER_CHAIN_FLOW",
        "HANDLER_CHAIN_EMITTER",
        "HANDLER_CHAIN_BACKGROUND_EMIT",
        "HANDLER_CHAIN_QUEUE_SIZE",
        "HANDLER_CHAIN_WARN_OUT_OF_RANGE",
    ):
        monkeypatch.delenv(var, raising=False)
    settings = Settings.from_env()
    assert settings == Settings()
    assert settings.emitter == "console"
    assert settings.background_emit is False


def test_from_env(monkeypatch):
    monkeypatch.setenv("HANDLER_CHAIN_FLOW", "a,b")
    monkeypatch.setenv("HANDLER_CHAIN_EMITTER", " Memory ")
    monkeypatch.setenv("HANDLER_CHAIN_BACKGROUND_EMIT", "yes")
    monkeypatch.setenv("HANDLER_CHAIN_QUEUE_SIZE", "7")
    monkeypatch.setenv("HANDLER_CHAIN_WARN_OUT_OF_RANGE", "1")

    settings = Settings.from_env()

    assert settings.flow == "a,b"
    assert settings.emitter == "memory"
    assert settings.background_emit is True
    assert settings.queue_size == 7
    assert settings.warn_out_of_range is True


def test_unknown_emitter_rejected(monkeypatch):
    monkeypatch.setenv("HANDLER_CHAIN_EMITTER", "kafka")
    with pytest.raises(ValidationError):
        Settings.from_env()


# ---------------------------------------------------------------------------
# Demo wiring
# ---------------------------------------------------------------------------


@patch("handler_chain.run.display")
def test_demo_runs_configured_flow(mock_display, monkeypatch):
    memory = MemoryTraceEmitter()
    monkeypatch.setenv("HANDLER_CHAIN_FLOW", "upper,frame,base64")
    monkeypatch.setattr(run, "build_emitter", lambda settings: memory)

    run.main()

    results = [c.args[0] for c in mock_display.final_result.call_args_list]
    assert results == [payload.upper() for payload in run.PAYLOADS]
    assert memory.last.order() == [
        ("pre", "upper"),
        ("pre", "frame"),
        ("pre", "base64"),
        ("post", "base64"),
        ("post", "frame"),
    ]


@patch("handler_chain.run.display")
def test_demo_unknown_handler_exits(mock_display, monkeypatch):
    monkeypatch.setenv("HANDLER_CHAIN_FLOW", "upper,nope")
    with pytest.raises(SystemExit):
        run.main()
    mock_display.halt.assert_called_once()
