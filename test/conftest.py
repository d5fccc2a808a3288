from __future__ import annotations

from typing import Any, Dict
from unittest.mock import AsyncMock

import pytest

from intent_engine.core.config import Settings
from intent_engine.runtime.engine import Engine
from intent_engine.strategy.executor import StrategyExecutor


@pytest.fixture
def shop_manifest() -> Dict[str, Any]:
    """A small storefront manifest in its camelCase document form."""
    return {
        "$schema": "https://example.com/manifest.schema.json",
        "version": "1.0.0",
        "metadata": {"name": "shop", "description": "Demo storefront", "author": "shop-team"},
        "capabilities": {
            "addToCart": {
                "id": "addToCart",
                "displayName": "Add to cart",
                "description": "Put a product into the cart",
                "examples": ["add item-1 to my cart"],
                "handler": {"name": "Add", "handlerRef": "add_to_cart"},
                "parameters": [
                    {
                        "name": "productId",
                        "type": "string",
                        "isRequired": True,
                        "description": "Product identifier",
                        "examples": ["item-1"],
                    },
                    {
                        "name": "quantity",
                        "type": "number",
                        "isRequired": False,
                        "description": "How many",
                        "validator": {"min": 1, "max": 99},
                    },
                ],
                "sideEffects": [{"name": "cart"}],
                "undoCapabilityId": "removeFromCart",
            },
            "removeFromCart": {
                "id": "removeFromCart",
                "displayName": "Remove from cart",
                "description": "Take a product out of the cart",
                "handler": {"name": "Remove", "handlerRef": "remove_from_cart"},
                "parameters": [
                    {"name": "productId", "type": "string", "isRequired": True},
                    {"name": "quantity", "type": "number", "isRequired": False},
                ],
                "sideEffects": [{"name": "cart"}],
            },
            "placeOrder": {
                "id": "placeOrder",
                "displayName": "Place order",
                "description": "Turn the cart into an order",
                "handler": {"name": "Order", "handlerRef": "place_order"},
                "parameters": [],
                "sideEffects": [{"name": "order"}],
            },
            "checkout": {
                "id": "checkout",
                "displayName": "Checkout",
                "description": "Pay for the cart",
                "handler": {"name": "Checkout", "handlerRef": "checkout"},
                "parameters": [
                    {"name": "total", "type": "number", "isRequired": True, "description": "Amount to charge"},
                    {
                        "name": "cvv",
                        "type": "string",
                        "isRequired": True,
                        "description": "Card security code",
                        "isSensitive": True,
                        "collectionApproach": "on-demand",
                        "validator": {"pattern": "^[0-9]{3,4}$"},
                    },
                ],
                "sideEffects": [{"name": "payment"}],
            },
        },
    }


@pytest.fixture
def shop_handlers() -> Dict[str, AsyncMock]:
    return {
        "add_to_cart": AsyncMock(return_value={"status": "added"}),
        "remove_from_cart": AsyncMock(return_value={"status": "removed"}),
        "place_order": AsyncMock(side_effect=RuntimeError("payment gateway unavailable")),
        "checkout": AsyncMock(return_value={"status": "paid"}),
    }


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from the process environment and any .env file."""
    return Settings(_env_file=None, INTENT_ENGINE_DEFAULT_TIMEOUT_MS=1000)


@pytest.fixture
def engine(shop_manifest: Dict[str, Any], shop_handlers: Dict[str, AsyncMock], test_settings: Settings) -> Engine:
    return Engine(shop_manifest, shop_handlers, config=test_settings)


@pytest.fixture
def strategy_executor(engine: Engine, test_settings: Settings) -> StrategyExecutor:
    return StrategyExecutor(engine, config=test_settings)
