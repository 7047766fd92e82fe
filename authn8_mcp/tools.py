"""Tool handlers exposed over MCP.

Each handler returns a text payload. Failures never escape a handler: they
are logged and rendered as ``Error: <message>`` so the transport always gets
a well-formed response.
"""

from __future__ import annotations

import json
import logging
from functools import wraps
from typing import Any, Awaitable, Callable

from .client import Authn8Client
from .errors import Authn8Error, NotFoundError, ValidationError
from .models import GetOtpRequest
from .resolver import AmbiguousMatch, NoMatch

logger = logging.getLogger(__name__)

TOOL_DESCRIPTIONS = {
    "list_accounts": (
        "Returns all 2FA accounts accessible to this token. Use this to see what "
        "accounts are available before requesting an OTP code."
    ),
    "get_otp": (
        "Generates a TOTP code for a specific account. You can provide either the "
        "account_id or account_name (partial match supported). If multiple "
        "accounts match the name, you'll get a list of matches to be more specific."
    ),
    "whoami": (
        "Returns information about the current token and what it has access to, "
        "including the business name, token name, scoped groups, account count, "
        "and expiration date."
    ),
}


def _to_json(payload: Any) -> str:
    return json.dumps(payload, indent=2)


def _error_text(message: str) -> str:
    return f"Error: {message}"


def text_boundary(
    func: Callable[..., Awaitable[str]],
) -> Callable[..., Awaitable[str]]:
    """Turn any exception raised by ``func`` into an error payload."""

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> str:
        try:
            return await func(*args, **kwargs)
        except Authn8Error as exc:
            logger.info(f"{func.__name__} failed: {exc.message}")
            return _error_text(exc.message)
        except Exception as exc:
            logger.exception(f"Unexpected error in {func.__name__}")
            return _error_text(str(exc) or exc.__class__.__name__)

    return wrapper


class Authn8Tools:
    """The three agent-facing operations, bound to one API client."""

    def __init__(self, client: Authn8Client) -> None:
        self.client = client

    @text_boundary
    async def list_accounts(self) -> str:
        """List every account the token can reach."""
        accounts = await self.client.list_accounts()
        if not accounts:
            return "No accounts are accessible with this token."
        return _to_json(
            [{"id": a.id, "name": a.name, "issuer": a.issuer_domain} for a in accounts]
        )

    @text_boundary
    async def get_otp(self, request: GetOtpRequest) -> str:
        """Return the current code for one account, by id or by name."""
        if not request.account_id and not request.account_name:
            raise ValidationError(
                "Either account_id or account_name must be provided."
            )

        if request.account_id:
            # Only used to label the result; the OTP endpoint is not probed.
            account = await self.client.find_account_by_id(request.account_id)
            if account is None:
                raise NotFoundError(
                    f'Account with ID "{request.account_id}" not found. '
                    "Use list_accounts to see available accounts."
                )
        else:
            outcome = await self.client.resolve_by_name(request.account_name)
            if isinstance(outcome, AmbiguousMatch):
                return outcome.message()
            if isinstance(outcome, NoMatch):
                raise NotFoundError(outcome.message())
            account = outcome.account

        otp = await self.client.get_otp(account.id)
        return _to_json({"account": account.name, "code": otp.code})

    @text_boundary
    async def whoami(self) -> str:
        """Describe the token in use. Always fetched live."""
        info = await self.client.get_token_info()
        return _to_json(
            {
                "business": info.business_name,
                "token_name": info.token_name,
                "scoped_groups": [g.name for g in info.scoped_groups],
                "account_count": info.account_count,
                "expires_at": info.expires_at,
            }
        )
