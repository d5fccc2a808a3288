from __future__ import annotations

from typing import Any, Dict

from intent_engine.runtime.executor import HandlerError, HandlerExecutionResult
from intent_engine.runtime.formatter import ResultFormatter
from intent_engine.schemas import ErrorType, Manifest


def test_success_carries_side_effects(shop_manifest: Dict[str, Any]) -> None:
    capability = Manifest.model_validate(shop_manifest).capabilities["addToCart"]

    result = ResultFormatter().format_success(HandlerExecutionResult(True, 12.5, data={"ok": 1}), capability)

    assert result.success is True
    assert result.data == {"ok": 1}
    assert result.side_effects == ["cart"]
    assert result.execution_time == 12.5


def test_handler_timeout_is_classified() -> None:
    raw = HandlerExecutionResult(False, 51.0, error=HandlerError("Handler execution timeout after 50ms", True))

    result = ResultFormatter().format_handler_error(raw, "checkout")

    assert result.error.type == ErrorType.timeout
    assert result.error.capability_id == "checkout"
    assert result.execution_time == 51.0


def test_handler_exception_is_described_by_type() -> None:
    boom = RuntimeError("declined")
    raw = HandlerExecutionResult(False, 1.0, error=HandlerError("declined", False, boom))

    result = ResultFormatter().format_handler_error(raw, "checkout")

    assert result.error.type == ErrorType.execution_error
    assert result.error.message == "declined"
    assert result.error.details == {"exceptionType": "RuntimeError"}
    assert "RuntimeError" in result.model_dump_json(by_alias=True)


def test_precondition_failure_details() -> None:
    result = ResultFormatter().format_precondition_failure("Your cart is empty", "Cart must not be empty", "checkout")

    assert result.error.type == ErrorType.precondition_failed
    assert result.error.message == "Your cart is empty"
    assert result.error.details == {"description": "Cart must not be empty"}


def test_add_suggestions_returns_new_result() -> None:
    formatter = ResultFormatter()
    original = formatter.format_validation_error('Capability "x" not found in manifest', "x")

    updated = formatter.add_suggestions(original, ["Did you mean: y?"])

    assert updated.suggestions == ["Did you mean: y?"]
    assert original.suggestions is None
    assert formatter.add_suggestions(original, []) is original
