"""Pytest configuration and fixtures"""
import json
import os
import pytest
from unittest.mock import AsyncMock, Mock

# Quiet logs during tests
os.environ.setdefault("LOG_LEVEL", "WARNING")

from shopcart.cart import CartOperations, PersistedCartStore
from shopcart.db import LocalStorage
from shopcart.notifications import Notifier

CART_KEY = "@test:cart"


@pytest.fixture
def sample_product():
    """Sample catalog record"""
    return {
        "id": 1,
        "title": "Tênis de Caminhada Leve Confortável",
        "price": 179.9,
        "image": "https://example.com/shoe-1.jpg",
    }


@pytest.fixture
def backend(tmp_path):
    """File-backed key-value store, wrapped to record calls"""
    return Mock(wraps=LocalStorage(tmp_path / "storage.json"))


@pytest.fixture
def store(backend):
    return PersistedCartStore(backend, CART_KEY)


@pytest.fixture
def stock_source():
    """Stock source returning 5 units by default"""
    source = Mock()
    source.get_stock = AsyncMock(return_value=5)
    return source


@pytest.fixture
def catalog_source(sample_product):
    source = Mock()
    source.get_product = AsyncMock(side_effect=lambda product_id: {**sample_product, "id": product_id})
    return source


@pytest.fixture
def sink():
    """Notification sink recording messages"""
    return Mock()


@pytest.fixture
def seed_cart(backend):
    """Write a stored cart before CartOperations loads it"""
    def _seed(records):
        backend.set(CART_KEY, json.dumps(records))
        backend.reset_mock()
    return _seed


@pytest.fixture
def make_operations(backend, stock_source, catalog_source, sink):
    """Build CartOperations over the fixtures (after any seeding); each call is a fresh session"""
    def _make(language="en"):
        return CartOperations(
            store=PersistedCartStore(backend, CART_KEY),
            stock_source=stock_source,
            catalog_source=catalog_source,
            notifier=Notifier(sink, language=language),
        )
    return _make
