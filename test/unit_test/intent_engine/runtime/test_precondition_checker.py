from __future__ import annotations

from unittest.mock import AsyncMock, Mock

import pytest

from intent_engine.runtime.preconditions import PreconditionChecker
from intent_engine.schemas.manifest import Precondition


def _precondition(ref: str, description: str = "", error_message: str = "failed") -> Precondition:
    return Precondition.model_validate(
        {
            "type": "state",
            "checker": {"name": ref, "handlerRef": ref},
            "description": description or ref,
            "errorMessage": error_message,
        }
    )


@pytest.mark.asyncio
async def test_empty_list_passes() -> None:
    checker = PreconditionChecker()

    assert (await checker.check_all(None, {})).passed is True
    assert (await checker.check_all([], {})).passed is True


@pytest.mark.asyncio
async def test_sync_and_async_checkers_receive_context() -> None:
    sync_check = Mock(return_value=True)
    async_check = AsyncMock(return_value=1)
    checker = PreconditionChecker()
    checker.register_many({"logged_in": sync_check, "has_stock": async_check})

    result = await checker.check_all([_precondition("logged_in"), _precondition("has_stock")], {"user": "u1"})

    assert result.passed is True
    sync_check.assert_called_once_with({"user": "u1"})
    async_check.assert_awaited_once_with({"user": "u1"})


@pytest.mark.asyncio
async def test_fail_fast_skips_later_checks() -> None:
    first = Mock(return_value=True)
    second = Mock(return_value=False)
    third = Mock(return_value=True)
    fourth = Mock(return_value=True)
    checker = PreconditionChecker()
    checker.register_many({"c0": first, "c1": second, "c2": third, "c3": fourth})

    result = await checker.check_all(
        [
            _precondition("c0"),
            _precondition("c1", "Cart must not be empty", "Your cart is empty"),
            _precondition("c2"),
            _precondition("c3"),
        ],
        {},
    )

    assert result.passed is False
    assert result.failed_condition.description == "Cart must not be empty"
    assert result.failed_condition.error_message == "Your cart is empty"
    first.assert_called_once()
    second.assert_called_once()
    third.assert_not_called()
    fourth.assert_not_called()


@pytest.mark.asyncio
async def test_unregistered_checker_fails() -> None:
    result = await PreconditionChecker().check_one(_precondition("ghost"), {})

    assert result.passed is False
    assert result.failed_condition.error_message == 'Precondition checker "ghost" not found'


@pytest.mark.asyncio
async def test_raising_checker_fails_with_message() -> None:
    checker = PreconditionChecker()
    checker.register_checker("flaky", Mock(side_effect=RuntimeError("session store down")))

    result = await checker.check_one(_precondition("flaky"), {})

    assert result.passed is False
    assert result.failed_condition.error_message == "Precondition check failed: session store down"


def test_register_checker_validates_arguments() -> None:
    checker = PreconditionChecker()
    with pytest.raises(ValueError):
        checker.register_checker("", Mock())
    with pytest.raises(TypeError):
        checker.register_checker("c", 42)  # type: ignore[arg-type]


def test_unregister_checker() -> None:
    checker = PreconditionChecker()
    checker.register_checker("c", Mock())
    checker.unregister_checker("c")

    assert checker.has_checker("c") is False
    assert checker.registered_refs() == []
