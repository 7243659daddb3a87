"""
Import validation tests.

These tests ensure all modules can be imported successfully, catching
issues like missing dependencies or circular imports BEFORE deployment.

Run with: pytest tests/unit/test_imports.py -v
"""

import importlib

import pytest


@pytest.mark.parametrize("module_name,attr", [
    ("handlers.main", "lambda_handler"),
    ("handlers.health_check", "lambda_handler"),
    ("handlers.checkin", "scan_handler"),
    ("handlers.checkin", "manual_handler"),
    ("handlers.events", "list_handler"),
    ("handlers.tickets", "register_handler"),
    ("handlers.dashboard", "lambda_handler"),
])
def test_handler_import(module_name, attr):
    """Each handler module should import and expose its entry point."""
    module = importlib.import_module(module_name)
    assert callable(getattr(module, attr))


@pytest.mark.parametrize("module_name", [
    "services.verification_service",
    "services.scan_session",
    "services.event_service",
    "services.ticket_service",
    "services.dashboard_service",
    "repositories.dynamodb_repo",
    "repositories.memory_repo",
    "repositories.factory",
    "models",
    "utils.date_utils",
])
def test_module_import(module_name):
    """Service, repository and model modules should import without errors."""
    importlib.import_module(module_name)
