"""
API v1 - Quota REST API

Versioned endpoints with OpenAPI/Swagger documentation.
"""

import os

from flask import Blueprint
from flask_restx import Api

API_VERSION = os.getenv("API_VERSION", "v1")

api_v1_bp = Blueprint("api_v1", __name__, url_prefix=f"/api/{API_VERSION}")

api = Api(
    api_v1_bp,
    version="1.0",
    title="Quota API",
    description="Posting quotas for submissions and comments",
    doc="/docs",
)

from .namespaces import quota_ns  # noqa: E402

api.add_namespace(quota_ns, path="/quotas")
