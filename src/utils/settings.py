"""
Runtime configuration read by the Lambdas.

Deploy-time sizing lives in infrastructure/config/settings.py; this is what
the running code needs to reach its tables.
"""

from dataclasses import dataclass
import os


@dataclass
class RuntimeSettings:
    """Settings resolved from the Lambda environment."""

    environment: str = "dev"
    aws_region: str = "eu-west-2"

    # "dynamodb" in deployed stacks, "memory" for local runs and tests
    store_backend: str = "dynamodb"
    table_prefix: str = "eventsphere-dev"

    # Store round-trip bounds
    store_connect_timeout_seconds: float = 2.0
    store_read_timeout_seconds: float = 3.0
    store_max_attempts: int = 2

    # Verifier-level retry of StoreUnavailable
    verify_retry_attempts: int = 3
    verify_retry_backoff_seconds: float = 0.2

    def table_name(self, collection: str) -> str:
        """Physical table name for a logical collection."""
        override = os.environ.get(f"{collection.upper()}_TABLE")
        return override or f"{self.table_prefix}-{collection}"

    @classmethod
    def from_environment(cls) -> "RuntimeSettings":
        """Load settings from environment variables."""
        env = os.environ.get("ENVIRONMENT", "dev")
        return cls(
            environment=env,
            aws_region=os.environ.get("AWS_REGION", "eu-west-2"),
            store_backend=os.environ.get("STORE_BACKEND", "dynamodb").lower(),
            table_prefix=os.environ.get("TABLE_PREFIX", f"eventsphere-{env}"),
            store_connect_timeout_seconds=float(
                os.environ.get("STORE_CONNECT_TIMEOUT_SECONDS", "2.0")
            ),
            store_read_timeout_seconds=float(os.environ.get("STORE_READ_TIMEOUT_SECONDS", "3.0")),
            store_max_attempts=int(os.environ.get("STORE_MAX_ATTEMPTS", "2")),
            verify_retry_attempts=int(os.environ.get("VERIFY_RETRY_ATTEMPTS", "3")),
            verify_retry_backoff_seconds=float(
                os.environ.get("VERIFY_RETRY_BACKOFF_SECONDS", "0.2")
            ),
        )
