"""
Main CDK Stack for the EventSphere check-in API.
"""

from aws_cdk import (
    Stack,
    Tags,
    CfnOutput,
)
from constructs import Construct

from infrastructure.constructs.data_layer import DataLayerConstruct
from infrastructure.constructs.api_layer import ApiLayerConstruct
from infrastructure.config.settings import Settings


class EventSphereStack(Stack):
    """Main stack wiring all constructs together."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        settings: Settings,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        Tags.of(self).add("Project", "eventsphere")
        Tags.of(self).add("Environment", settings.environment)
        Tags.of(self).add("ManagedBy", "cdk")

        # 1) Data layer.
        data_construct = DataLayerConstruct(
            self,
            "DataLayer",
            environment=settings.environment,
            table_prefix=settings.table_prefix,
            point_in_time_recovery=settings.point_in_time_recovery,
        )

        # 2) API layer (single Lambda).
        api_construct = ApiLayerConstruct(
            self,
            "ApiLayer",
            environment=settings.environment,
            function_env={
                "STORE_BACKEND": "dynamodb",
                "TABLE_PREFIX": settings.table_prefix,
                "EVENTS_TABLE": data_construct.events_table.table_name,
                "REGISTRATIONS_TABLE": data_construct.registrations_table.table_name,
                "LOG_LEVEL": settings.log_level,
                "STORE_CONNECT_TIMEOUT_SECONDS": str(settings.store_connect_timeout_seconds),
                "STORE_READ_TIMEOUT_SECONDS": str(settings.store_read_timeout_seconds),
                "VERIFY_RETRY_ATTEMPTS": str(settings.verify_retry_attempts),
            },
            lambda_memory_mb=settings.lambda_memory_mb,
            lambda_timeout_seconds=settings.lambda_timeout_seconds,
        )

        # Permissions for the API Lambda.
        data_construct.events_table.grant_read_write_data(api_construct.main_lambda)
        data_construct.registrations_table.grant_read_write_data(api_construct.main_lambda)

        # Outputs to quickly find resources.
        CfnOutput(self, "ApiEndpoint", value=api_construct.api.api_endpoint)
        CfnOutput(self, "EventsTable", value=data_construct.events_table.table_name)
        CfnOutput(self, "RegistrationsTable", value=data_construct.registrations_table.table_name)
