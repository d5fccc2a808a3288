"""
Unit tests for the optional Logfire monitoring module.

This test suite covers:
- Initialization with disabled, token-less and complete configurations
- Graceful degradation when Logfire fails to configure
- Strategy event emission only while monitoring is active
"""

import sys
from unittest.mock import MagicMock, patch

import pytest

from intent_engine.core import monitoring
from intent_engine.core.config import Settings


@pytest.fixture(autouse=True)
def _reset_monitoring_state():
    monitoring._logfire_active = False
    yield
    monitoring._logfire_active = False


@pytest.fixture
def fake_logfire():
    module = MagicMock()
    with patch.dict(sys.modules, {"logfire": module}):
        yield module


def _settings(**env) -> Settings:
    return Settings(_env_file=None, **env)


class TestInitializeLogfire:
    def test_disabled(self, fake_logfire):
        assert monitoring.initialize_logfire(_settings(LOGFIRE_ENABLED=False)) is False
        assert monitoring.is_logfire_active() is False
        fake_logfire.configure.assert_not_called()

    def test_enabled_without_token(self, fake_logfire):
        assert monitoring.initialize_logfire(_settings(LOGFIRE_ENABLED=True, LOGFIRE_TOKEN=None)) is False
        fake_logfire.configure.assert_not_called()

    def test_enabled_with_token(self, fake_logfire):
        cfg = _settings(LOGFIRE_ENABLED=True, LOGFIRE_TOKEN="tok", LOGFIRE_ENVIRONMENT="test")

        assert monitoring.initialize_logfire(cfg) is True
        assert monitoring.is_logfire_active() is True
        fake_logfire.configure.assert_called_once_with(
            token="tok", service_name="intent-engine", environment="test"
        )

    def test_configure_failure_is_contained(self, fake_logfire):
        fake_logfire.configure.side_effect = RuntimeError("bad token")

        assert monitoring.initialize_logfire(_settings(LOGFIRE_ENABLED=True, LOGFIRE_TOKEN="tok")) is False
        assert monitoring.is_logfire_active() is False


class TestLogStrategyEvent:
    def test_noop_when_inactive(self, fake_logfire):
        monitoring.log_strategy_event("strategy started", steps=2)

        fake_logfire.info.assert_not_called()

    def test_emits_when_active(self, fake_logfire):
        monitoring.initialize_logfire(_settings(LOGFIRE_ENABLED=True, LOGFIRE_TOKEN="tok"))

        monitoring.log_strategy_event("strategy paused", step_index=1, parameters=["cvv"])

        fake_logfire.info.assert_called_once_with("strategy paused", step_index=1, parameters=["cvv"])

    def test_emit_failure_is_swallowed(self, fake_logfire):
        monitoring.initialize_logfire(_settings(LOGFIRE_ENABLED=True, LOGFIRE_TOKEN="tok"))
        fake_logfire.info.side_effect = RuntimeError("exporter down")

        monitoring.log_strategy_event("strategy completed", steps=1)

    @pytest.mark.asyncio
    async def test_strategy_lifecycle_is_reported(self, fake_logfire, strategy_executor):
        monitoring.initialize_logfire(_settings(LOGFIRE_ENABLED=True, LOGFIRE_TOKEN="tok"))

        paused = await strategy_executor.execute_strategy(
            [{"capabilityId": "checkout", "parameters": {"total": 10}}]
        )
        await strategy_executor.resume_strategy(paused.resume_token, {"cvv": "123"})

        events = [c.args[0] for c in fake_logfire.info.call_args_list]
        assert events == ["strategy started", "strategy paused", "strategy resumed", "strategy completed"]
        for c in fake_logfire.info.call_args_list:
            assert "123" not in repr(c)
