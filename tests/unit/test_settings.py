"""Runtime and deployment settings tests."""

from infrastructure.config.settings import Settings
from repositories.dynamodb_repo import DynamoDbDocumentStore
from repositories.factory import build_store, reset_memory_store
from repositories.memory_repo import InMemoryDocumentStore
from utils.settings import RuntimeSettings


def test_runtime_defaults(monkeypatch):
    for name in ("STORE_BACKEND", "TABLE_PREFIX", "VERIFY_RETRY_ATTEMPTS", "REGISTRATIONS_TABLE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ENVIRONMENT", "staging")

    settings = RuntimeSettings.from_environment()

    assert settings.store_backend == "dynamodb"
    assert settings.table_prefix == "eventsphere-staging"
    assert settings.verify_retry_attempts == 3
    assert settings.table_name("registrations") == "eventsphere-staging-registrations"


def test_runtime_overrides(monkeypatch):
    monkeypatch.setenv("STORE_BACKEND", "MEMORY")
    monkeypatch.setenv("REGISTRATIONS_TABLE", "regs-from-stack")
    monkeypatch.setenv("STORE_READ_TIMEOUT_SECONDS", "1.5")

    settings = RuntimeSettings.from_environment()

    assert settings.store_backend == "memory"
    assert settings.table_name("registrations") == "regs-from-stack"
    assert settings.store_read_timeout_seconds == 1.5


def test_build_store_memory_is_shared():
    reset_memory_store()
    settings = RuntimeSettings(store_backend="memory")
    first = build_store(settings)
    assert isinstance(first, InMemoryDocumentStore)
    assert build_store(settings) is first
    reset_memory_store()


def test_build_store_dynamodb():
    store = build_store(RuntimeSettings(store_backend="dynamodb", aws_region="eu-west-2"))
    assert isinstance(store, DynamoDbDocumentStore)


def test_deploy_settings_prod_overrides(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "prod")
    settings = Settings.from_environment()
    assert settings.table_prefix == "eventsphere-prod"
    assert settings.point_in_time_recovery is True
    assert settings.lambda_memory_mb == 512


def test_deploy_settings_dev(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "dev")
    settings = Settings.from_environment()
    assert settings.table_prefix == "eventsphere-dev"
    assert settings.point_in_time_recovery is False
