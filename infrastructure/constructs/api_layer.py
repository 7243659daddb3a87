"""
API layer construct: shared Lambda + HTTP API routes.

A single Lambda keeps the DynamoDB client warm across routes.
Uses Docker bundling for dependencies (runs in CI/CD pipeline).
"""

from typing import Dict

from aws_cdk import (
    BundlingOptions,
    Duration,
    aws_lambda as _lambda,
    aws_apigatewayv2 as apigw,
    aws_apigatewayv2_integrations as integrations,
    aws_logs as logs,
)
from constructs import Construct

ROUTE_DEFS = (
    (apigw.HttpMethod.GET, "/health"),
    (apigw.HttpMethod.POST, "/checkin/scan"),
    (apigw.HttpMethod.POST, "/checkin/manual"),
    (apigw.HttpMethod.GET, "/events"),
    (apigw.HttpMethod.POST, "/events"),
    (apigw.HttpMethod.GET, "/events/{id}"),
    (apigw.HttpMethod.PATCH, "/events/{id}"),
    (apigw.HttpMethod.POST, "/events/{id}/registrations"),
    (apigw.HttpMethod.GET, "/events/{id}/chat-access"),
    (apigw.HttpMethod.GET, "/users/{id}/tickets"),
    (apigw.HttpMethod.GET, "/organizers/{id}/dashboard"),
)


class ApiLayerConstruct(Construct):
    """Expose event and check-in endpoints via HTTP API."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        environment: str,
        function_env: Dict[str, str],
        lambda_memory_mb: int = 256,
        lambda_timeout_seconds: int = 10,
    ) -> None:
        super().__init__(scope, construct_id)

        # Bundle Lambda code with dependencies using Docker (works in CI/CD)
        bundled_code = _lambda.Code.from_asset(
            "src",
            bundling=BundlingOptions(
                image=_lambda.Runtime.PYTHON_3_12.bundling_image,
                command=[
                    "bash", "-c",
                    "pip install pydantic python-json-logger -t /asset-output && "
                    "cp -r . /asset-output"
                ],
            ),
        )

        self.main_lambda = _lambda.Function(
            self,
            "ApiHandler",
            runtime=_lambda.Runtime.PYTHON_3_12,
            handler="handlers.main.lambda_handler",
            code=bundled_code,
            memory_size=lambda_memory_mb,
            timeout=Duration.seconds(lambda_timeout_seconds),
            architecture=_lambda.Architecture.ARM_64,
            environment={"ENVIRONMENT": environment, **function_env},
            log_retention=logs.RetentionDays.ONE_WEEK,
        )

        self.api = apigw.HttpApi(
            self,
            "HttpApi",
            api_name=f"eventsphere-api-{environment}",
            cors_preflight=apigw.CorsPreflightOptions(
                allow_origins=["*"],
                allow_methods=[apigw.CorsHttpMethod.ANY],
            ),
        )

        integration = integrations.HttpLambdaIntegration(
            "LambdaIntegration", self.main_lambda
        )

        for method, path in ROUTE_DEFS:
            self.api.add_routes(
                path=path,
                methods=[method],
                integration=integration,
            )
