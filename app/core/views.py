"""
Core views providing infrastructure endpoints.

Views here are not part of the chat domain: the health check used by
orchestration, and the JSON 404/500 handlers wired in config.urls.
"""

import logging

from django.core.cache import cache
from django.db import DatabaseError, connection
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def health_check(request):
    """
    Health check endpoint for monitoring and orchestration.

    Returns:
        JsonResponse with status and component health:
        - status: "healthy" or "unhealthy"
        - database: "connected" or "disconnected"
        - cache: "connected" or "disconnected"

    HTTP Status Codes:
        200: Database reachable
        503: Database unreachable
    """
    health_status = {
        "status": "healthy",
        "database": "unknown",
        "cache": "unknown",
    }
    is_healthy = True

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        health_status["database"] = "connected"
    except DatabaseError:
        logger.exception("Health check could not reach the database")
        health_status["database"] = "disconnected"
        health_status["status"] = "unhealthy"
        is_healthy = False

    # Redis cache is configured with IGNORE_EXCEPTIONS, a miss means unreachable
    cache.set("health_check", "ok", timeout=1)
    if cache.get("health_check") == "ok":
        health_status["cache"] = "connected"
    else:
        # Cache failure is not critical, the API does not depend on it
        health_status["cache"] = "disconnected"

    status_code = 200 if is_healthy else 503
    return JsonResponse(health_status, status=status_code)


def route_not_found(request, exception=None):
    """JSON body for unknown URLs."""
    return JsonResponse(
        {"message": f"URL Not Found: {request.path}", "status": 404},
        status=404,
    )


def server_error(request):
    """JSON body for errors that escaped every other handler."""
    return JsonResponse({"message": "Server Error!", "status": 500}, status=500)
