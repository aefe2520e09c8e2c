"""
Quota Exemption Rules

Composable predicates deciding when a quota policy does not apply to a
subject. Each rule is a plain callable ``(subject, as_of) -> bool`` so new
rules can be added without touching the engine.
"""

from datetime import datetime
from typing import Iterable

from .value_objects import ExemptionRule, Subject


def account_older_than(days: int) -> ExemptionRule:
    """
    Exempt accounts whose age in whole days exceeds ``days``.

    Partial days are truncated, so an account registered 30 days and
    23 hours ago is 30 days old and not older than 30 days.
    """
    def rule(subject: Subject, as_of: datetime) -> bool:
        return subject.account_age(as_of).days > days

    rule.__name__ = f"account_older_than_{days}_days"
    return rule


def submission_points_at_least(points: int) -> ExemptionRule:
    """Exempt subjects with a submission score of at least ``points``."""
    def rule(subject: Subject, as_of: datetime) -> bool:
        return subject.submission_points >= points

    rule.__name__ = f"submission_points_at_least_{points}"
    return rule


def comment_points_at_least(points: int) -> ExemptionRule:
    """Exempt subjects with a comment score of at least ``points``."""
    def rule(subject: Subject, as_of: datetime) -> bool:
        return subject.comment_points >= points

    rule.__name__ = f"comment_points_at_least_{points}"
    return rule


def user_in(user_ids: Iterable[str]) -> ExemptionRule:
    """Exempt an explicit list of users (case-insensitive)."""
    allowed = frozenset(u.strip().lower() for u in user_ids if u and u.strip())

    def rule(subject: Subject, as_of: datetime) -> bool:
        return subject.user_id.strip().lower() in allowed

    rule.__name__ = "user_in_allow_list"
    return rule


def any_of(*rules: ExemptionRule) -> ExemptionRule:
    """Exempt when at least one rule matches. Rules run in order, lazily."""
    def rule(subject: Subject, as_of: datetime) -> bool:
        return any(r(subject, as_of) for r in rules)

    rule.__name__ = "any_of(" + ", ".join(r.__name__ for r in rules) + ")"
    return rule


def all_of(*rules: ExemptionRule) -> ExemptionRule:
    """Exempt only when every rule matches."""
    def rule(subject: Subject, as_of: datetime) -> bool:
        return all(r(subject, as_of) for r in rules)

    rule.__name__ = "all_of(" + ", ".join(r.__name__ for r in rules) + ")"
    return rule


def negate(inner: ExemptionRule) -> ExemptionRule:
    def rule(subject: Subject, as_of: datetime) -> bool:
        return not inner(subject, as_of)

    rule.__name__ = f"not_{inner.__name__}"
    return rule


def established_member(min_age_days: int = 30, min_points: int = 50) -> ExemptionRule:
    """
    Standard exemption for trusted accounts.

    Exempt if the account is older than ``min_age_days`` whole days OR the
    submission score is at least ``min_points``.

    Args:
        min_age_days: Account age that must be exceeded
        min_points: Submission points that must be reached

    Returns:
        Composed exemption rule
    """
    return any_of(
        account_older_than(min_age_days),
        submission_points_at_least(min_points),
    )
