"""
Quota Configuration

Environment-based configuration for posting quotas.
Provides centralized configuration management with sensible defaults.
"""

import os
from dataclasses import dataclass, field
from typing import List

from domain.errors import QuotaConfigurationError


@dataclass
class QuotaConfig:
    """
    Quota configuration from environment variables.

    Thresholds for each posting quota, the exemption parameters for
    established members, and the user allow-list.
    """

    # Feature flags
    enabled: bool = True
    is_production: bool = False
    enforce_in_development: bool = False

    # Submission quotas
    daily_posting_per_sub: int = 10
    hourly_posting_per_sub: int = 3
    daily_posting_negative_score: int = 3
    hourly_global_posting: int = 3
    daily_global_posting: int = 10
    daily_cross_posting: int = 2

    # Comment quotas
    daily_comment_posting: int = 200
    hourly_comment_posting: int = 50
    daily_comment_posting_negative_score: int = 10

    # Established member exemption
    exempt_account_age_days: int = 30
    exempt_submission_points: int = 50

    # Users never subject to quotas
    exempt_users: List[str] = field(default_factory=list)

    # Activity storage
    activity_retention_hours: int = 48

    @classmethod
    def from_env(cls) -> 'QuotaConfig':
        """
        Load configuration from environment variables.

        Returns:
            QuotaConfig instance with loaded configuration

        Raises:
            QuotaConfigurationError: If a numeric variable is not an integer
        """
        return cls(
            enabled=_env_flag('QUOTA_ENABLED', 'true'),
            is_production=os.getenv('FLASK_ENV') == 'production',
            enforce_in_development=_env_flag('QUOTA_ENFORCE_IN_DEVELOPMENT', 'false'),
            daily_posting_per_sub=_env_int('QUOTA_DAILY_POSTING_PER_SUB', 10),
            hourly_posting_per_sub=_env_int('QUOTA_HOURLY_POSTING_PER_SUB', 3),
            daily_posting_negative_score=_env_int('QUOTA_DAILY_POSTING_NEGATIVE_SCORE', 3),
            hourly_global_posting=_env_int('QUOTA_HOURLY_GLOBAL_POSTING', 3),
            daily_global_posting=_env_int('QUOTA_DAILY_GLOBAL_POSTING', 10),
            daily_cross_posting=_env_int('QUOTA_DAILY_CROSS_POSTING', 2),
            daily_comment_posting=_env_int('QUOTA_DAILY_COMMENT_POSTING', 200),
            hourly_comment_posting=_env_int('QUOTA_HOURLY_COMMENT_POSTING', 50),
            daily_comment_posting_negative_score=_env_int(
                'QUOTA_DAILY_COMMENT_POSTING_NEGATIVE_SCORE', 10
            ),
            exempt_account_age_days=_env_int('QUOTA_EXEMPT_ACCOUNT_AGE_DAYS', 30),
            exempt_submission_points=_env_int('QUOTA_EXEMPT_SUBMISSION_POINTS', 50),
            exempt_users=cls._parse_user_list(os.getenv('QUOTA_EXEMPT_USERS', '')),
            activity_retention_hours=_env_int('ACTIVITY_RETENTION_HOURS', 48),
        )

    @staticmethod
    def _parse_user_list(value: str) -> List[str]:
        """
        Parse a comma-separated list of user names.

        Example: "admin,system,moderator"

        Args:
            value: Comma-separated user names

        Returns:
            List of user names, blanks removed
        """
        if not value:
            return []
        return [name.strip() for name in value.split(',') if name.strip()]

    def should_enforce(self) -> bool:
        """
        Determine if quotas should be enforced.

        Quotas are enforced when QUOTA_ENABLED is true and either FLASK_ENV
        is "production" or QUOTA_ENFORCE_IN_DEVELOPMENT is set.

        Returns:
            True if quotas should be enforced, False otherwise
        """
        return self.enabled and (self.is_production or self.enforce_in_development)


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() == 'true'


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw.strip())
    except ValueError as e:
        raise QuotaConfigurationError(
            f"Environment variable {name} must be an integer, got {raw!r}",
            original_error=e,
        ) from e
