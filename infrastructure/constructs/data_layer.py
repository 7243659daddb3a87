"""
Data layer construct: DynamoDB tables for events and registrations.

Every table is keyed by "id"; secondary indexes are named "<field>-index"
because the document store queries by that convention.
"""

from aws_cdk import (
    RemovalPolicy,
    aws_dynamodb as dynamodb,
)
from constructs import Construct


class DataLayerConstruct(Construct):
    """Provision document tables."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        environment: str,
        table_prefix: str,
        point_in_time_recovery: bool,
    ) -> None:
        super().__init__(scope, construct_id)
        removal_policy = RemovalPolicy.RETAIN if environment == "prod" else RemovalPolicy.DESTROY

        self.events_table = self._table(
            "Events",
            f"{table_prefix}-events",
            point_in_time_recovery,
            removal_policy,
            indexed_fields=("created_by",),
        )

        # Registrations are the check-in state; losing them re-admits everyone.
        self.registrations_table = self._table(
            "Registrations",
            f"{table_prefix}-registrations",
            point_in_time_recovery,
            removal_policy,
            indexed_fields=("user_id", "event_id"),
        )

    def _table(self, construct_id, table_name, pitr, removal_policy, indexed_fields):
        table = dynamodb.Table(
            self,
            construct_id,
            table_name=table_name,
            partition_key=dynamodb.Attribute(name="id", type=dynamodb.AttributeType.STRING),
            billing_mode=dynamodb.BillingMode.PAY_PER_REQUEST,
            point_in_time_recovery=pitr,
            removal_policy=removal_policy,
        )
        for field in indexed_fields:
            table.add_global_secondary_index(
                index_name=f"{field}-index",
                partition_key=dynamodb.Attribute(name=field, type=dynamodb.AttributeType.STRING),
                projection_type=dynamodb.ProjectionType.ALL,
            )
        return table
