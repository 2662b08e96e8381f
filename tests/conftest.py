"""Shared fixtures and helpers for tests."""

import logging
import warnings
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest
from testcontainers.core.container import DockerContainer
from testcontainers.core.waiting_utils import wait_for_logs

from alembic import command
from alembic.config import Config
from trader_goods_stub.db import InMemoryTraderStore
from trader_goods_stub.db.migrations import get_alembic_config

logger = logging.getLogger(__name__)

_REPO_ROOT = Path(__file__).parent.parent

EORI = "GB123456789012"
ACTOR_ID = "GB098765432109"
UKIMS_NUMBER = "XIUKIM47699357400020231115081800"
NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# PostgresTestBase: helpers for integration tests that need a database container
# ---------------------------------------------------------------------------


class PostgresTestBase:
    IMAGE = "postgres:16"

    @staticmethod
    def create_container() -> DockerContainer:
        return (
            DockerContainer(PostgresTestBase.IMAGE)
            .with_exposed_ports(5432)
            .with_env("POSTGRES_PASSWORD", "postgres")
        )

    @staticmethod
    def get_alembic_config(connection_url: str) -> Config:
        return get_alembic_config(connection_url, root=_REPO_ROOT)

    @staticmethod
    def run_migrations(connection_url: str) -> None:
        command.upgrade(PostgresTestBase.get_alembic_config(connection_url), "head")

    @staticmethod
    def cleanup_migrations(connection_url: str) -> None:
        command.downgrade(PostgresTestBase.get_alembic_config(connection_url), "base")

    @staticmethod
    def wait_for_postgres(container: DockerContainer) -> None:
        # postgres restarts once after initdb; the second "ready" line is the real one
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", DeprecationWarning)
            wait_for_logs(
                container,
                lambda logs: logs.count("database system is ready to accept connections") >= 2,
                timeout=60,
            )


# ---------------------------------------------------------------------------
# Shared payload builders and unit-test fixtures
# ---------------------------------------------------------------------------


def record_payload(**overrides: Any) -> dict[str, Any]:
    """A create-record body that satisfies the bundled schema."""
    payload: dict[str, Any] = {
        "eori": EORI,
        "actorId": ACTOR_ID,
        "traderRef": "BAN001001",
        "comcode": "10410100",
        "goodsDescription": "Organic bananas",
        "countryOfOrigin": "EC",
        "category": 3,
        "assessments": [
            {
                "assessmentId": "abc123",
                "primaryCategory": 1,
                "condition": {
                    "type": "abc123",
                    "conditionId": "Y923",
                    "conditionDescription": "Products not considered as waste",
                    "conditionTraderText": "Excluded product",
                },
            }
        ],
        "supplementaryUnit": 500,
        "measurementUnit": "Square metre (m2)",
        "comcodeEffectiveFromDate": "2024-01-01T00:00:00Z",
    }
    payload.update(overrides)
    return payload


def profile_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "eori": EORI,
        "actorId": ACTOR_ID,
        "ukimsNumber": UKIMS_NUMBER,
        "nirmsNumber": "RMS-GB-123456",
        "niphlNumber": "6S123456",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def resources_dir() -> Path:
    return Path(__file__).parent / "resources"


@pytest.fixture
def store() -> InMemoryTraderStore:
    return InMemoryTraderStore()
