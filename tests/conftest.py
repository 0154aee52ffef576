"""
Pytest fixtures for the activation resolver test suite.

Provides:
- Structured logging configuration and a ``captured_logs`` helper
- Small in-code catalogs (the A/B/C scenario, a diamond, a deep chain)
- The shipped hotel-suite catalog loaded through ``get_active_catalog``
- SQLAlchemy sessions for the persistence adapter

Environment Variables:
- DATABASE_URL: database for the persistence tests.  Defaults to an
  in-memory SQLite database; set a PostgreSQL URL to run them there.
"""

import json
import logging
import os
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from activation_config import get_active_catalog
from activation_kernel.domain.catalog import Bundle, ModuleCatalog, ModuleDefinition, Plan
from activation_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from activation_kernel.services.activation_controller import ActivationController
from activation_services.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)

DEFAULT_DATABASE_URL = "sqlite://"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture activation_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, controller):
            controller.enable("a", set())
            logs = captured_logs()
            assert any(r["message"] == "module_enabled" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("activation_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Catalog fixtures
# =============================================================================


def make_module(module_id: str, *requires: str, is_base: bool | None = None) -> ModuleDefinition:
    """Module whose name and short name are derived from its id."""
    return ModuleDefinition(
        id=module_id,
        name=f"Module {module_id.upper()}",
        short_name=module_id.upper(),
        is_base=not requires if is_base is None else is_base,
        requires=tuple(requires),
    )


@pytest.fixture
def abc_catalog() -> ModuleCatalog:
    """
    B is a base module; A and C both require B.

    Bundles: ``essentials`` = {B, A}; ``just-c`` = {B, C}.
    """
    return ModuleCatalog.build(
        [make_module("b"), make_module("a", "b"), make_module("c", "b")],
        [
            Bundle(id="essentials", name="Essentials", modules=("b", "a"), recommended=True),
            Bundle(id="just-c", name="Just C", modules=("b", "c")),
        ],
        [Plan(id="basic", name="Basic", included_modules=("a",), optional_modules=("c",))],
        catalog_id="abc",
        revision="rev-abc",
    )


@pytest.fixture
def diamond_catalog() -> ModuleCatalog:
    """
    Diamond: D requires B and C; B and C both require A.

        D -> B -> A
        D -> C -> A
    """
    return ModuleCatalog.build(
        [
            make_module("a"),
            make_module("b", "a"),
            make_module("c", "a"),
            make_module("d", "b", "c"),
        ],
        catalog_id="diamond",
    )


@pytest.fixture
def chain_catalog() -> ModuleCatalog:
    """Chain: Z requires Y requires X, plus an unrelated W."""
    return ModuleCatalog.build(
        [
            make_module("x"),
            make_module("y", "x"),
            make_module("z", "y"),
            make_module("w"),
        ],
        catalog_id="chain",
    )


@pytest.fixture(scope="session")
def hotel_catalog() -> ModuleCatalog:
    """The shipped hotel-suite catalog."""
    return get_active_catalog()


@pytest.fixture
def controller(abc_catalog) -> ActivationController:
    return ActivationController(abc_catalog)


@pytest.fixture
def hotel_controller(hotel_catalog) -> ActivationController:
    return ActivationController(hotel_catalog)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture(scope="session")
def db_engine():
    """Engine for the persistence tests (in-memory SQLite by default)."""
    database_url = os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL)
    engine = init_engine_from_url(database_url)
    create_tables()
    yield engine
    drop_tables()
    reset_engine()


@pytest.fixture
def session(db_engine) -> Generator[Session, None, None]:
    """A session whose work is rolled back after each test."""
    sess = get_session()
    try:
        yield sess
    finally:
        sess.rollback()
        sess.close()
