"""
API Models for request/response validation and Swagger documentation
"""

from flask_restx import Namespace, fields

quota_ns = Namespace("quotas", description="Posting quota operations")

# =============================================================================
# Request Models
# =============================================================================

subject_model = quota_ns.model(
    "Subject",
    {
        "user_id": fields.String(
            required=True, description="User name", example="alice"
        ),
        "registered_at": fields.String(
            required=True,
            description="Account registration time (ISO 8601, UTC if no offset)",
            example="2024-01-01T00:00:00Z",
        ),
        "submission_points": fields.Integer(
            description="Submission point score", default=0, example=12
        ),
        "comment_points": fields.Integer(
            description="Comment point score", default=0, example=40
        ),
    },
)

check_request = quota_ns.model(
    "QuotaCheckRequest",
    {
        "action": fields.String(
            required=True,
            description="Action being attempted",
            enum=["submission", "comment"],
            example="submission",
        ),
        "subject": fields.Nested(subject_model, required=True),
        "scope": fields.String(
            description="Target subverse", example="news", allow_null=True
        ),
        "content": fields.String(
            description="Submitted URL or content key",
            example="https://example.com/story",
            allow_null=True,
        ),
    },
)

activity_request = quota_ns.model(
    "ActivityRequest",
    {
        "action": fields.String(
            required=True, enum=["submission", "comment"], example="comment"
        ),
        "user_id": fields.String(required=True, example="alice"),
        "scope": fields.String(example="news", allow_null=True),
        "content": fields.String(allow_null=True),
    },
)

# =============================================================================
# Response Models
# =============================================================================

violation_model = quota_ns.model(
    "QuotaViolation",
    {
        "policy": fields.String(description="Violated policy name"),
        "action_kind": fields.String(),
        "threshold": fields.Integer(),
        "observed_count": fields.Integer(),
        "window_start": fields.String(),
        "window_end": fields.String(),
    },
)

decision_response = quota_ns.model(
    "QuotaDecision",
    {
        "allowed": fields.Boolean(),
        "as_of": fields.String(description="Evaluation instant"),
        "violation": fields.Nested(violation_model, allow_null=True),
    },
)

activity_response = quota_ns.model(
    "ActivityEvent",
    {
        "event_id": fields.String(),
        "action_kind": fields.String(),
        "user_id": fields.String(),
        "occurred_at": fields.String(),
        "scope": fields.String(allow_null=True),
        "content": fields.String(allow_null=True),
    },
)

policy_model = quota_ns.model(
    "QuotaPolicy",
    {
        "name": fields.String(),
        "action_kind": fields.String(),
        "window_seconds": fields.Integer(),
        "threshold": fields.Integer(),
        "scope_mode": fields.String(),
        "content_filter": fields.Boolean(),
        "has_exemption": fields.Boolean(),
        "description": fields.String(),
    },
)

policy_page_response = quota_ns.model(
    "QuotaPolicyPage",
    {
        "items": fields.List(fields.Nested(policy_model)),
        "page_index": fields.Integer(),
        "page_size": fields.Integer(),
        "total_count": fields.Integer(),
        "total_pages": fields.Integer(),
        "has_previous_page": fields.Boolean(),
        "has_next_page": fields.Boolean(),
    },
)

error_response = quota_ns.model(
    "ErrorResponse",
    {
        "error": fields.String(description="Error category"),
        "title": fields.String(),
        "message": fields.String(),
        "action": fields.String(),
        "details": fields.Raw(description="Violation or diagnostic details"),
    },
)
