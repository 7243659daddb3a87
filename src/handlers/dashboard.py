"""Handler for GET /organizers/{id}/dashboard."""

from typing import Optional

from utils.error_handling import AppError, to_response
from utils.http import json_response, path_param
from utils.logging_config import get_logger

logger = get_logger(__name__)

_dashboard_service: Optional["DashboardService"] = None


def _get_dashboard_service():
    """Lazy-load DashboardService."""
    global _dashboard_service
    if _dashboard_service is None:
        from repositories.factory import build_store
        from services.dashboard_service import DashboardService
        from utils.settings import RuntimeSettings

        _dashboard_service = DashboardService(build_store(RuntimeSettings.from_environment()))
    return _dashboard_service


def lambda_handler(event, context):
    """Return the organizer's registration, check-in and revenue summary."""
    try:
        summary = _get_dashboard_service().summary(path_param(event, "id"))
    except AppError as exc:
        return to_response(exc)
    return json_response(200, summary.model_dump_json())
