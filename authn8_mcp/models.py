"""Data models for the Authn8 MCP server."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    """Immutable model populated from the camelCase API payloads."""

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, coerce_numbers_to_str=True
    )


class ScopedGroup(_WireModel):
    """Account group the token is scoped to."""

    id: str
    name: str


class TokenInfo(_WireModel):
    """Details about the personal access token in use."""

    business_name: str = Field(..., alias="businessName")
    token_name: str = Field(..., alias="tokenName")
    scoped_groups: list[ScopedGroup] = Field(
        default_factory=list, alias="scopedGroups"
    )
    account_count: int = Field(..., alias="accountCount")
    expires_at: str = Field(..., alias="expiresAt")


class Account(_WireModel):
    """A 2FA account reachable by the token."""

    id: str
    name: str
    issuer_domain: str = Field(..., alias="issuerDomain")


class AccountsResponse(_WireModel):
    accounts: list[Account] = Field(default_factory=list)


class OtpResult(_WireModel):
    """A freshly generated one-time passcode."""

    name: str
    code: str
    length: int


class GetOtpRequest(BaseModel):
    """Arguments for the ``get_otp`` tool.

    Attributes:
        account_id: Exact account identifier, as returned by list_accounts.
        account_name: Case-insensitive partial match on account name or
            issuer domain.
    """

    account_id: str | None = Field(default=None, description="ID of the account")
    account_name: str | None = Field(
        default=None, description="Name to search for (partial match)"
    )
