"""
Quota Policy Set

Read-only, ordered collection of quota policies grouped by action kind.
"""

from typing import Dict, Iterable, Iterator, Optional, Tuple

from ..errors import QuotaConfigurationError
from .value_objects import ActionKind, QuotaPolicy


class QuotaPolicySet:
    """
    Immutable ordered collection of QuotaPolicy instances.

    Declaration order is preserved inside each action kind so the same
    violated policy is always reported first for identical data. Built once
    at startup and shared across threads without locking.
    """

    def __init__(self, policies: Iterable[QuotaPolicy]):
        """
        Validate and index the policies.

        Args:
            policies: Policies in declaration order

        Raises:
            QuotaConfigurationError: On a non-policy entry or a duplicate name
        """
        ordered = tuple(policies)
        seen = set()
        for policy in ordered:
            if not isinstance(policy, QuotaPolicy):
                raise QuotaConfigurationError(
                    f"Expected QuotaPolicy, got {type(policy).__name__}"
                )
            if policy.name in seen:
                raise QuotaConfigurationError(f"Duplicate policy name: {policy.name}")
            seen.add(policy.name)

        self._policies: Tuple[QuotaPolicy, ...] = ordered
        self._by_name: Dict[str, QuotaPolicy] = {p.name: p for p in ordered}
        self._by_action: Dict[ActionKind, Tuple[QuotaPolicy, ...]] = {
            kind: tuple(p for p in ordered if p.action_kind is kind)
            for kind in ActionKind
        }

    def for_action(self, action_kind: ActionKind) -> Tuple[QuotaPolicy, ...]:
        """Policies counting ``action_kind``, in declaration order."""
        return self._by_action.get(action_kind, ())

    def get(self, name: str) -> Optional[QuotaPolicy]:
        return self._by_name.get(name)

    def __iter__(self) -> Iterator[QuotaPolicy]:
        return iter(self._policies)

    def __len__(self) -> int:
        return len(self._policies)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __repr__(self) -> str:
        names = ", ".join(p.name for p in self._policies)
        return f"QuotaPolicySet([{names}])"
