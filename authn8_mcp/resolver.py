"""Resolve a free-text account reference against an account snapshot.

Matching is a case-insensitive substring test on the account name OR its
issuer domain. There is no ranking: when several accounts match, all of them
are returned in their original order and the caller has to be more specific.
"""

from __future__ import annotations

from typing import Literal, Sequence, Union

from pydantic import BaseModel, ConfigDict

from .models import Account


class _Outcome(BaseModel):
    model_config = ConfigDict(frozen=True)


class ResolvedAccount(_Outcome):
    """Exactly one account matched."""

    kind: Literal["resolved"] = "resolved"
    account: Account


class AmbiguousMatch(_Outcome):
    """Two or more accounts matched; never auto-selected."""

    kind: Literal["ambiguous"] = "ambiguous"
    query: str
    candidates: tuple[Account, ...]

    def message(self) -> str:
        lines = [
            f"  - {a.name} ({a.issuer_domain}) - ID: {a.id}" for a in self.candidates
        ]
        return (
            f'Multiple accounts match "{self.query}". Please be more specific:\n'
            + "\n".join(lines)
        )


class NoMatch(_Outcome):
    """Nothing matched. Carries every known account as a hint."""

    kind: Literal["not_found"] = "not_found"
    query: str
    known_accounts: tuple[Account, ...]

    def message(self) -> str:
        lines = [f"  - {a.name} ({a.issuer_domain})" for a in self.known_accounts]
        return (
            f'No account found matching "{self.query}". Available accounts:\n'
            + "\n".join(lines)
        )


ResolutionOutcome = Union[ResolvedAccount, AmbiguousMatch, NoMatch]


def matches(query: str, account: Account) -> bool:
    """Return True if ``query`` is contained in the account name or issuer."""
    needle = query.lower()
    return needle in account.name.lower() or needle in account.issuer_domain.lower()


def resolve_by_name(query: str, accounts: Sequence[Account]) -> ResolutionOutcome:
    """Classify ``query`` against ``accounts``.

    An empty query is contained in every string, so it matches every account.
    """
    found = tuple(a for a in accounts if matches(query, a))
    if not found:
        return NoMatch(query=query, known_accounts=tuple(accounts))
    if len(found) == 1:
        return ResolvedAccount(account=found[0])
    return AmbiguousMatch(query=query, candidates=found)
