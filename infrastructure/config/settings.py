"""
Environment-specific deployment settings.

Cost-optimized defaults for development/testing.
"""

from dataclasses import dataclass
import os


@dataclass
class Settings:
    """Deployment settings with cost-optimized defaults."""

    # Environment
    environment: str = "dev"
    aws_region: str = "eu-west-2"  # Default AWS region

    # DynamoDB
    table_prefix: str = "eventsphere-dev"
    point_in_time_recovery: bool = False

    # Lambda Configuration
    lambda_memory_mb: int = 256
    lambda_timeout_seconds: int = 10
    log_level: str = "INFO"

    # Store round-trip bounds inside the Lambda (keep well under the Lambda timeout)
    store_connect_timeout_seconds: float = 2.0
    store_read_timeout_seconds: float = 3.0
    verify_retry_attempts: int = 3

    @classmethod
    def from_environment(cls) -> "Settings":
        """Load settings from environment variables."""
        env = os.environ.get("ENVIRONMENT", "dev")
        region = os.environ.get("AWS_REGION", "eu-west-2")
        log_level = os.environ.get("LOG_LEVEL", "INFO")

        # Production overrides
        if env == "prod":
            return cls(
                environment="prod",
                aws_region=region,
                table_prefix="eventsphere-prod",
                point_in_time_recovery=True,
                lambda_memory_mb=512,
                lambda_timeout_seconds=15,
                log_level=log_level,
            )

        return cls(
            environment=env,
            aws_region=region,
            table_prefix=f"eventsphere-{env}",
            log_level=log_level,
        )
