"""Pytest configuration and fixtures for catalog tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from catalog.config import Config, PagingConfig, StorageConfig
from catalog.core import QueryEngine
from catalog.database import RecordStore
from catalog.index import CategoryIndex
from catalog.main import create_app


@pytest.fixture
def test_config() -> Config:
    """In-memory store, small paging limits."""
    return Config(
        storage=StorageConfig(data_file=None),
        paging=PagingConfig(default_page_size=10, max_page_size=50),
    )


@pytest.fixture
def store() -> RecordStore:
    return RecordStore()


@pytest.fixture
def index() -> CategoryIndex:
    return CategoryIndex()


@pytest.fixture
def engine() -> QueryEngine:
    return QueryEngine()


@pytest.fixture
def data_file(tmp_path: Path) -> Path:
    return tmp_path / "catalog.json"


@pytest.fixture
def app(engine: QueryEngine, test_config: Config) -> FastAPI:
    return create_app(engine=engine, config=test_config)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
