"""
API Namespaces - Posting quota endpoints
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from flask import current_app, request
from flask_restx import Resource

from application.dependency_container import DependencyNotFoundError
from application.quota_service import QuotaService
from domain.errors import (
    ErrorCategory,
    QuotaCancelledError,
    QuotaConfigurationError,
    QuotaUnavailableError,
    create_error_response,
)
from domain.quota_enforcement import ActionKind, QuotaDecision, Subject

from api.v1.models import (
    activity_request,
    activity_response,
    check_request,
    decision_response,
    error_response,
    policy_page_response,
    quota_ns,
)


class RequestValidationError(ValueError):
    """Raised when a request body cannot be turned into domain objects."""
    pass


# =============================================================================
# Quota Namespace
# =============================================================================


@quota_ns.route("/check")
class QuotaCheck(Resource):
    """Evaluate posting quotas without recording anything"""

    @quota_ns.doc("check_quota")
    @quota_ns.expect(check_request)
    @quota_ns.response(200, "Allowed", decision_response)
    @quota_ns.response(400, "Bad Request", error_response)
    @quota_ns.response(429, "Quota Exceeded", error_response)
    @quota_ns.response(503, "Service Unavailable", error_response)
    def post(self):
        """
        Check whether a user may submit or comment now

        Returns the first violated quota when the action is denied.
        """
        service = _get_quota_service()
        if service is None:
            return _service_missing()

        try:
            data = _json_body()
            action = _parse_action(data.get("action"))
            subject = _parse_subject(data.get("subject"))
            scope = _optional_string(data, "scope")
            content = _optional_string(data, "content")
        except RequestValidationError as e:
            return create_error_response(ErrorCategory.INVALID_REQUEST, str(e), {"reason": str(e)}, 400)

        return _run_check(
            lambda: service.check(action, subject, scope, content)
        )


@quota_ns.route("/submit")
class QuotaSubmit(Resource):
    """Check quotas and record the action when allowed"""

    @quota_ns.doc("submit_with_quota")
    @quota_ns.expect(check_request)
    @quota_ns.response(201, "Recorded", activity_response)
    @quota_ns.response(400, "Bad Request", error_response)
    @quota_ns.response(429, "Quota Exceeded", error_response)
    @quota_ns.response(503, "Service Unavailable", error_response)
    def post(self):
        """
        Check quotas and, if allowed, record the submission or comment
        """
        service = _get_quota_service()
        if service is None:
            return _service_missing()

        try:
            data = _json_body()
            action = _parse_action(data.get("action"))
            subject = _parse_subject(data.get("subject"))
            scope = _optional_string(data, "scope")
            content = _optional_string(data, "content")
        except RequestValidationError as e:
            return create_error_response(ErrorCategory.INVALID_REQUEST, str(e), {"reason": str(e)}, 400)

        recorded = {}

        def check_and_record() -> QuotaDecision:
            decision, event = service.check_and_record(
                action, subject, scope, content
            )
            recorded["event"] = event
            return decision

        body, status = _run_check(check_and_record)
        if status == 200:
            return recorded["event"].to_dict(), 201
        return body, status


@quota_ns.route("/activity")
class Activity(Resource):
    """Record activity without checking quotas"""

    @quota_ns.doc("record_activity")
    @quota_ns.expect(activity_request)
    @quota_ns.response(201, "Recorded", activity_response)
    @quota_ns.response(400, "Bad Request", error_response)
    @quota_ns.response(503, "Service Unavailable", error_response)
    def post(self):
        """
        Record a submission or comment that was accepted elsewhere
        """
        service = _get_quota_service()
        if service is None:
            return _service_missing()

        try:
            data = _json_body()
            action = _parse_action(data.get("action"))
            user_id = _require_string(data, "user_id")
            scope = _optional_string(data, "scope")
            content = _optional_string(data, "content")
        except RequestValidationError as e:
            return create_error_response(ErrorCategory.INVALID_REQUEST, str(e), {"reason": str(e)}, 400)

        try:
            event = service.record(action, user_id, scope, content)
        except QuotaUnavailableError as e:
            current_app.logger.warning(f"Activity store unavailable: {e}")
            return create_error_response(ErrorCategory.SERVICE_UNAVAILABLE, str(e), status_code=503)

        return event.to_dict(), 201


@quota_ns.route("/policies")
class Policies(Resource):
    """List configured quota policies"""

    @quota_ns.doc("list_policies", params={
        "page": "Zero-based page index",
        "size": "Page size (1-100)",
        "action": "Filter by action (submission, comment)",
    })
    @quota_ns.response(200, "Success", policy_page_response)
    @quota_ns.response(400, "Bad Request", error_response)
    def get(self):
        """
        List quota policies in evaluation order
        """
        service = _get_quota_service()
        if service is None:
            return _service_missing()

        try:
            page = int(request.args.get("page", 0))
            size = int(request.args.get("size", 20))
            if not 1 <= size <= 100:
                raise ValueError("size must be between 1 and 100")
            action_arg = request.args.get("action")
            action = ActionKind.parse(action_arg) if action_arg else None
            result = service.list_policies(page, size, action)
        except ValueError as e:
            return create_error_response(ErrorCategory.INVALID_REQUEST, str(e), {"reason": str(e)}, 400)

        return result.to_dict(lambda policy: policy.to_dict()), 200


# =============================================================================
# Helpers
# =============================================================================


def _run_check(evaluate) -> tuple:
    """
    Run a quota evaluation and map its outcome to an HTTP response.

    Denied maps to 429, unavailable and cancelled to 503, and
    configuration errors (missing scope or content) to 400.
    """
    try:
        decision = evaluate()
    except QuotaConfigurationError as e:
        return create_error_response(
            ErrorCategory.CONFIGURATION_ERROR, str(e), {"reason": str(e)}, 400
        )
    except QuotaUnavailableError as e:
        current_app.logger.warning(f"Quota check unavailable: {e}")
        return create_error_response(ErrorCategory.SERVICE_UNAVAILABLE, str(e), status_code=503)
    except QuotaCancelledError as e:
        return create_error_response(ErrorCategory.REQUEST_CANCELLED, str(e), status_code=503)

    if decision.denied:
        return create_error_response(
            ErrorCategory.QUOTA_EXCEEDED,
            f"Quota {decision.violation.policy.name} exceeded",
            decision.violation.to_dict(),
            429,
        )
    return decision.to_dict(), 200


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise RequestValidationError("Request body must be a JSON object")
    return data


def _parse_action(value: Any) -> ActionKind:
    if not value:
        raise RequestValidationError("action is required")
    try:
        return ActionKind.parse(value)
    except ValueError as e:
        raise RequestValidationError(str(e)) from e


def _parse_subject(data: Any) -> Subject:
    if not isinstance(data, dict):
        raise RequestValidationError("subject is required")
    user_id = _require_string(data, "user_id")
    registered_at = _parse_datetime(_require_string(data, "registered_at"))
    try:
        return Subject(
            user_id=user_id,
            registered_at=registered_at,
            submission_points=int(data.get("submission_points") or 0),
            comment_points=int(data.get("comment_points") or 0),
        )
    except (TypeError, ValueError) as e:
        raise RequestValidationError(f"Invalid subject: {e}") from e


def _parse_datetime(value: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise RequestValidationError(f"Invalid timestamp: {value}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _require_string(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise RequestValidationError(f"{key} is required")
    return value.strip()


def _optional_string(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise RequestValidationError(f"{key} must be a string")
    return value


def _get_quota_service() -> Optional[QuotaService]:
    """
    Get quota service from DI container.

    Returns:
        QuotaService instance or None if not available
    """
    container = getattr(current_app, "container", None)
    if container is None:
        current_app.logger.warning("DI container not available for quota checks")
        return None
    try:
        return container.resolve(QuotaService)
    except DependencyNotFoundError as e:
        current_app.logger.warning(f"Quota service not available: {e}")
        return None


def _service_missing() -> tuple:
    return create_error_response(
        ErrorCategory.SERVICE_UNAVAILABLE,
        "Quota service not initialized",
        status_code=503,
    )
