"""Tests for errors, state cells, configuration and logging setup."""

import asyncio
import io
import logging
import os

import pytest

from concord.config import _apply_env_overrides, get_config, load_config
from concord.core.errors import ConcordError, ErrorCode, fusion_error
from concord.foundation.logging import configure_logging, resolve_level
from concord.observable import StateCell, owned_cell


class TestErrors:
    """Tests for ConcordError formatting."""

    def test_message_and_id(self) -> None:
        err = ConcordError(ErrorCode.WORKER_NOT_FOUND, {"worker": "creative"})
        assert str(err) == "[CC-3001] Worker 'creative' is not registered."
        assert err.category == "worker"
        assert err.is_recoverable

    def test_missing_template_key_keeps_template(self) -> None:
        err = ConcordError(ErrorCode.WORKER_FAILED)
        assert "{worker}" in err.message

    def test_fusion_error_keeps_cause(self) -> None:
        cause = ValueError("boom")
        err = fusion_error("chrono_sculptor", cause)
        assert err.cause is cause
        assert err.to_dict()["context"] == {"fusion_type": "chrono_sculptor", "detail": "boom"}

    def test_config_errors_not_recoverable(self) -> None:
        assert not ErrorCode.CONFIG_INVALID.is_recoverable
        assert ErrorCode.CONFIG_INVALID.category == "config"


class TestStateCell:
    """Tests for single-writer observable values."""

    def test_second_writer_rejected(self) -> None:
        cell, _ = owned_cell("state", 0)
        with pytest.raises(ConcordError) as exc_info:
            cell.claim_writer()
        assert exc_info.value.code is ErrorCode.RUNTIME_WRITER_CLAIMED

    def test_subscribers_see_every_set(self) -> None:
        cell, writer = owned_cell("count", 0)
        seen: list[int] = []
        unsubscribe = cell.subscribe(seen.append)

        writer.set(1)
        assert writer.update(lambda v: v + 1) == 2
        unsubscribe()
        writer.set(3)

        assert seen == [1, 2]
        assert cell.value == 3

    def test_subscriber_error_is_isolated(self) -> None:
        cell, writer = owned_cell("count", 0)
        seen: list[int] = []

        def explode(value: int) -> None:
            raise RuntimeError("bad subscriber")

        cell.subscribe(explode)
        cell.subscribe(seen.append)
        writer.set(5)

        assert seen == [5]
        assert cell.stats == {"subscribers": 2, "errors": 1}

    @pytest.mark.asyncio
    async def test_wait_for(self) -> None:
        cell: StateCell[int] = StateCell("count", 0)
        writer = cell.claim_writer()

        async def bump() -> None:
            for i in range(1, 4):
                await asyncio.sleep(0)
                writer.set(i)

        task = asyncio.create_task(bump())
        assert await cell.wait_for(lambda v: v >= 3, timeout=1.0) == 3
        await task
        assert cell.stats["subscribers"] == 0

    @pytest.mark.asyncio
    async def test_wait_for_already_true(self) -> None:
        cell = StateCell("flag", True)
        assert await cell.wait_for(bool) is True


class TestConfig:
    """Tests for configuration loading."""

    @pytest.fixture(autouse=True)
    def _isolated(self, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        for key in [k for k in os.environ if k.startswith("CONCORD_")]:
            monkeypatch.delenv(key)

    def test_defaults(self) -> None:
        config = load_config()
        assert config.engine.evolution_threshold == 100
        assert config.dream.poll_interval == 30
        assert config.debug is False
        assert get_config() is config

    def test_yaml_file(self, tmp_path) -> None:
        path = tmp_path / "concord.yaml"
        path.write_text("engine:\n  evolution_threshold: 5\ndream:\n  importance_threshold: 0.9\n")
        config = load_config(path)
        assert config.engine.evolution_threshold == 5
        assert config.dream.importance_threshold == 0.9
        assert config.engine.routes["creative"] == "creative"

    def test_project_local_file(self, tmp_path) -> None:
        (tmp_path / ".concord").mkdir()
        (tmp_path / ".concord" / "config.yaml").write_text("debug: true\n")
        assert load_config().debug is True

    def test_env_overrides_file(self, tmp_path, monkeypatch) -> None:
        path = tmp_path / "concord.yaml"
        path.write_text("dream:\n  poll_interval: 60\n")
        monkeypatch.setenv("CONCORD_DREAM_POLL_INTERVAL", "5")
        assert load_config(path).dream.poll_interval == 5

    def test_env_override_parsing(self) -> None:
        result = _apply_env_overrides(
            {},
            {
                "CONCORD_ENGINE_EVOLUTION_STEP": "0.25",
                "CONCORD_DEBUG": "TRUE",
                "CONCORD_DREAM_NOT_A_FIELD": "1",
                "OTHER_VAR": "x",
            },
        )
        assert result == {"engine": {"evolution_step": 0.25}, "debug": True}

    def test_unknown_key_rejected(self, tmp_path) -> None:
        path = tmp_path / "concord.yaml"
        path.write_text("engine:\n  warp_factor: 9\n")
        with pytest.raises(ConcordError) as exc_info:
            load_config(path)
        assert exc_info.value.code is ErrorCode.CONFIG_INVALID

    def test_inverted_cycle_delays_rejected(self, tmp_path) -> None:
        path = tmp_path / "concord.yaml"
        path.write_text("dream:\n  cycle_delay_min: 50\n  cycle_delay_max: 10\n")
        with pytest.raises(ConcordError, match="cycle_delay_min"):
            load_config(path)

    def test_unreadable_yaml_skipped(self, tmp_path) -> None:
        path = tmp_path / "concord.yaml"
        path.write_text("engine: [unclosed\n")
        assert load_config(path).engine.evolution_threshold == 100


class TestLogging:
    """Tests for logging configuration."""

    @pytest.fixture(autouse=True)
    def _restore_root(self, monkeypatch):
        monkeypatch.delenv("CONCORD_LOG_LEVEL", raising=False)
        monkeypatch.delenv("CONCORD_DEBUG", raising=False)
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_default_is_warning(self) -> None:
        assert resolve_level() == logging.WARNING
        assert resolve_level(debug=True) == logging.DEBUG

    def test_env_level_beats_debug_flag(self, monkeypatch) -> None:
        monkeypatch.setenv("CONCORD_LOG_LEVEL", "error")
        assert resolve_level(debug=True) == logging.ERROR
        assert resolve_level(level="INFO") == logging.INFO

    def test_unknown_level_falls_back(self) -> None:
        assert resolve_level(level="chatty") == logging.WARNING
        assert resolve_level(level="15") == 15

    def test_configure_writes_to_stream(self) -> None:
        stream = io.StringIO()
        assert configure_logging(level="INFO", stream=stream) == logging.INFO
        logging.getLogger("concord.test").info("hello %s", "there")
        assert "concord.test: hello there" in stream.getvalue()

    def test_debug_quiets_runtime_libraries(self) -> None:
        configure_logging(debug=True, stream=io.StringIO())
        assert logging.getLogger("psutil").level == logging.WARNING
        assert logging.getLogger("asyncio").level == logging.WARNING
