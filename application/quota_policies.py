"""
Standard Quota Policies

Builds the posting-quota catalogue from configuration. Policies are listed
in the order they are evaluated: the first violated one is reported to the
user, so cheaper and more specific checks come first.
"""

from datetime import timedelta

from domain.quota_enforcement import ActionKind, QuotaPolicy, QuotaPolicySet, ScopeMode
from domain.quota_enforcement.exemptions import (
    any_of,
    comment_points_at_least,
    established_member,
    submission_points_at_least,
    user_in,
)
from infrastructure.quota_config import QuotaConfig

DAY = timedelta(hours=24)
HOUR = timedelta(hours=1)
# Hourly comment checks look back 59 minutes.
COMMENT_HOUR = timedelta(minutes=59)


def build_policy_set(config: QuotaConfig) -> QuotaPolicySet:
    """
    Create the policy set for submissions and comments.

    Args:
        config: Quota configuration with thresholds and exemption settings

    Returns:
        QuotaPolicySet in evaluation order

    Raises:
        QuotaConfigurationError: If a configured threshold is not positive
    """
    allow_list = user_in(config.exempt_users)
    trusted = established_member(
        min_age_days=config.exempt_account_age_days,
        min_points=config.exempt_submission_points,
    )

    def exempt_when(*rules):
        return any_of(allow_list, *rules)

    return QuotaPolicySet([
        # Submissions
        QuotaPolicy(
            name="daily_cross_posting",
            action_kind=ActionKind.SUBMISSION,
            window=DAY,
            threshold=config.daily_cross_posting,
            content_filter=True,
            exemption=exempt_when(),
            description="Same link submitted too many times in 24 hours",
        ),
        QuotaPolicy(
            name="hourly_posting_per_subverse",
            action_kind=ActionKind.SUBMISSION,
            window=HOUR,
            threshold=config.hourly_posting_per_sub,
            scope_mode=ScopeMode.PER_SCOPE,
            exemption=exempt_when(),
            description="Submissions to one subverse in the last hour",
        ),
        QuotaPolicy(
            name="daily_posting_per_subverse",
            action_kind=ActionKind.SUBMISSION,
            window=DAY,
            threshold=config.daily_posting_per_sub,
            scope_mode=ScopeMode.PER_SCOPE,
            exemption=exempt_when(),
            description="Submissions to one subverse in the last 24 hours",
        ),
        QuotaPolicy(
            name="hourly_global_posting",
            action_kind=ActionKind.SUBMISSION,
            window=HOUR,
            threshold=config.hourly_global_posting,
            exemption=exempt_when(trusted),
            description="Submissions by new, low-scoring accounts in the last hour",
        ),
        QuotaPolicy(
            name="daily_global_posting",
            action_kind=ActionKind.SUBMISSION,
            window=DAY,
            threshold=config.daily_global_posting,
            exemption=exempt_when(trusted),
            description="Submissions by new, low-scoring accounts in the last 24 hours",
        ),
        QuotaPolicy(
            name="daily_posting_negative_score",
            action_kind=ActionKind.SUBMISSION,
            window=DAY,
            threshold=config.daily_posting_negative_score,
            exemption=exempt_when(submission_points_at_least(0)),
            description="Submissions by accounts with a negative submission score",
        ),
        # Comments
        QuotaPolicy(
            name="hourly_comment_posting",
            action_kind=ActionKind.COMMENT,
            window=COMMENT_HOUR,
            threshold=config.hourly_comment_posting,
            exemption=exempt_when(),
            description="Comments in the last hour",
        ),
        QuotaPolicy(
            name="daily_comment_posting",
            action_kind=ActionKind.COMMENT,
            window=DAY,
            threshold=config.daily_comment_posting,
            exemption=exempt_when(),
            description="Comments in the last 24 hours",
        ),
        QuotaPolicy(
            name="daily_comment_posting_negative_score",
            action_kind=ActionKind.COMMENT,
            window=DAY,
            threshold=config.daily_comment_posting_negative_score,
            exemption=exempt_when(comment_points_at_least(0)),
            description="Comments by accounts with a negative comment score",
        ),
    ])
