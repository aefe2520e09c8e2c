"""
Application Factory

Creates and configures the Flask application with all dependencies.
Services can be injected for tests; otherwise they are built from the
environment.
"""

import logging
import os
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS

from application.dependency_container import DependencyContainer
from application.event_publisher import EventPublisher
from application.quota_policies import build_policy_set
from application.quota_service import QuotaService
from config.celery_config import make_celery
from config.redis_config import init_redis, redis_health_check
from domain.events import ActivityRecordedEvent, QuotaCheckFailedEvent, QuotaDeniedEvent
from domain.quota_enforcement import (
    IActivityRepository,
    IClock,
    QuotaEngine,
    QuotaPolicySet,
    SystemClock,
)
from infrastructure.activity_repository_factory import ActivityRepositoryFactory
from infrastructure.event_handlers import LoggingEventHandler
from infrastructure.quota_config import QuotaConfig
from infrastructure.redis_activity_repository import RedisActivityRepository

logger = logging.getLogger(__name__)


class AppConfig:
    """Application configuration."""

    def __init__(self):
        self.api_version = os.getenv("API_VERSION", "v1")
        self.flask_env = os.getenv("FLASK_ENV", "development")
        self.is_production = self.flask_env == "production"
        self.celery_enabled = os.getenv("CELERY_ENABLED", "true").lower() == "true"
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()


def create_app(
    config: Optional[AppConfig] = None,
    quota_config: Optional[QuotaConfig] = None,
    repository: Optional[IActivityRepository] = None,
    clock: Optional[IClock] = None,
) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Application configuration, uses default if None
        quota_config: Quota thresholds, loaded from the environment if None
        repository: Activity store, built by ActivityRepositoryFactory if None
        clock: Clock for quota evaluation, system clock if None

    Returns:
        Configured Flask application

    Raises:
        QuotaConfigurationError: If the quota configuration is malformed
    """
    if config is None:
        config = AppConfig()

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = Flask(__name__)

    CORS(
        app,
        resources={
            r"/api/*": {
                "origins": "*",
                "methods": ["GET", "POST", "OPTIONS"],
                "allow_headers": ["Content-Type", "Authorization"],
                "max_age": 3600,
            }
        },
    )

    quota_config = quota_config or QuotaConfig.from_env()

    _initialize_infrastructure(app, config, needs_redis=repository is None)
    _initialize_services(app, quota_config, repository, clock or SystemClock())
    _register_blueprints(app, config)
    _register_health_endpoint(app)

    return app


def _initialize_infrastructure(app: Flask, config: AppConfig, needs_redis: bool) -> None:
    """
    Initialize Redis and Celery.

    Args:
        app: Flask application
        config: Application configuration
        needs_redis: Whether the activity store will use Redis
    """
    if needs_redis and os.getenv("ACTIVITY_BACKEND", "redis").lower() == "redis":
        init_redis()

    app.celery = None
    if config.celery_enabled:
        try:
            app.celery = make_celery(app)
            logger.info("Celery initialized successfully")
        except Exception as e:
            # Periodic pruning is optional; keys also expire on their own
            logger.warning(f"Could not initialize Celery: {e}")


def _initialize_services(
    app: Flask,
    quota_config: QuotaConfig,
    repository: Optional[IActivityRepository],
    clock: IClock,
) -> None:
    """
    Build the quota services and attach them to the app via DependencyContainer.

    The policy set is validated here, so a malformed configuration stops
    the application from starting.

    Args:
        app: Flask application
        quota_config: Quota configuration
        repository: Activity store or None to build one
        clock: Clock shared by engine and service
    """
    container = DependencyContainer()

    if repository is None:
        repository = ActivityRepositoryFactory.create(quota_config.activity_retention_hours)

    policy_set = build_policy_set(quota_config)
    engine = QuotaEngine(policy_set, repository, clock)

    event_publisher = EventPublisher()
    event_publisher.subscribe_many(
        [QuotaDeniedEvent, QuotaCheckFailedEvent, ActivityRecordedEvent],
        LoggingEventHandler(logging.getLogger("quota.events")).handle,
    )

    quota_service = QuotaService(engine, repository, quota_config, event_publisher, clock)

    container.register_singleton(QuotaConfig, quota_config)
    container.register_singleton(QuotaPolicySet, policy_set)
    container.register_singleton(IActivityRepository, repository)
    container.register_singleton(QuotaEngine, engine)
    container.register_singleton(EventPublisher, event_publisher)
    container.register_singleton(QuotaService, quota_service)

    app.container = container
    logger.info(
        f"Quota services initialized with {len(policy_set)} policies "
        f"(enforcing={quota_config.should_enforce()})"
    )


def _register_blueprints(app: Flask, config: AppConfig) -> None:
    from api.v1 import api_v1_bp

    app.register_blueprint(api_v1_bp)
    logger.info(
        f"API {config.api_version} registered at /api/{config.api_version} "
        f"with Swagger UI at /api/{config.api_version}/docs"
    )


def _get_health_status(app: Flask) -> tuple[dict, int]:
    """
    Get health status of the activity store and Celery.

    Returns:
        Tuple of (health_status_dict, http_status_code)
    """
    health_status = {
        "status": "ok",
        "activity_store": "unknown",
        "celery": "available" if getattr(app, "celery", None) is not None else "unavailable",
    }

    container = getattr(app, "container", None)
    repository = container.resolve(IActivityRepository) if container else None
    if repository is None:
        health_status["activity_store"] = "unavailable"
        health_status["status"] = "degraded"
    elif isinstance(repository, RedisActivityRepository):
        if redis_health_check():
            health_status["activity_store"] = "connected"
        else:
            health_status["activity_store"] = "disconnected"
            health_status["status"] = "degraded"
    else:
        health_status["activity_store"] = type(repository).__name__

    status_code = 200 if health_status["status"] == "ok" else 503
    return health_status, status_code


def _register_health_endpoint(app: Flask) -> None:
    @app.route("/health", methods=["GET"])
    def health():
        """Overall health of the application and its dependencies."""
        health_status, status_code = _get_health_status(app)
        return jsonify(health_status), status_code
