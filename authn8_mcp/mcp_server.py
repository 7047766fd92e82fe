"""Authn8 MCP Server.

Validates the configured token once, then serves the ``list_accounts``,
``get_otp`` and ``whoami`` tools. If validation fails, the process exits with
status 1 before any tool is registered.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from datetime import datetime
from typing import Annotated

import click
import httpx
from dotenv import load_dotenv
from fastmcp import FastMCP
from pydantic import Field

from .client import Authn8Client
from .config import Authn8Settings
from .errors import DOMAIN_ERRORS, Authn8Error, UpstreamError
from .models import GetOtpRequest, TokenInfo
from .tools import TOOL_DESCRIPTIONS, Authn8Tools

logger = logging.getLogger(__name__)

SERVER_NAME = "Authn8 MCP Server"


async def validate_token(client: Authn8Client) -> TokenInfo:
    """Fetch token info, relabelling connectivity failures with the API URL.

    Auth, scope, not-found and rate-limit errors are re-raised unchanged.
    """
    try:
        return await client.get_token_info()
    except DOMAIN_ERRORS:
        raise
    except Exception as exc:
        detail = exc.message if isinstance(exc, Authn8Error) else str(exc)
        status = exc.status_code if isinstance(exc, Authn8Error) else None
        raise UpstreamError(
            "Failed to connect to Authn8 API. Please check AUTHN8_API_URL "
            f"({client.base_url}). Error: {detail}",
            status_code=status,
        ) from exc


def format_expiry(value: str) -> str:
    """Render an ISO-8601 timestamp as e.g. ``Jan 5, 2027``."""
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return f"{dt:%b} {dt.day}, {dt.year}"


def startup_banner(info: TokenInfo) -> list[str]:
    return [
        SERVER_NAME,
        f"Business: {info.business_name}",
        f"Token: {info.token_name}",
        f"Accounts: {info.account_count}",
        f"Expires: {format_expiry(info.expires_at)}",
        "",
    ]


def build_server(tools: Authn8Tools) -> FastMCP:
    """Create the FastMCP server and register the tools against ``tools``."""
    mcp = FastMCP(SERVER_NAME)

    @mcp.tool(name="list_accounts", description=TOOL_DESCRIPTIONS["list_accounts"])
    async def list_accounts() -> str:
        """Return all accounts accessible to the token as JSON."""
        return await tools.list_accounts()

    @mcp.tool(name="get_otp", description=TOOL_DESCRIPTIONS["get_otp"])
    async def get_otp(
        account_id: Annotated[
            str | None, Field(description="ID of the account")
        ] = None,
        account_name: Annotated[
            str | None, Field(description="Name to search for (partial match)")
        ] = None,
    ) -> str:
        """
        Return the current OTP code for one account.

        Args:
            account_id (str, optional): Exact account ID.
            account_name (str, optional): Partial, case-insensitive name or
                issuer domain.

        Returns:
            str: JSON with the account name and code, a list of candidates
            when the name is ambiguous, or an error message.
        """
        request = GetOtpRequest(account_id=account_id, account_name=account_name)
        return await tools.get_otp(request)

    @mcp.tool(name="whoami", description=TOOL_DESCRIPTIONS["whoami"])
    async def whoami() -> str:
        """Return details about the token in use as JSON."""
        return await tools.whoami()

    return mcp


async def serve(
    settings: Authn8Settings,
    transport: str = "stdio",
    *,
    http_transport: httpx.AsyncBaseTransport | None = None,
) -> None:
    """Validate the token, then run the MCP server until it stops."""
    api_key = settings.require_api_key()
    async with Authn8Client(
        api_key,
        settings.api_url,
        timeout=settings.timeout,
        cache_ttl=settings.cache_ttl,
        transport=http_transport,
    ) as client:
        info = await validate_token(client)
        for line in startup_banner(info):
            click.echo(line, err=True)

        mcp = build_server(Authn8Tools(client))
        logger.info(f"Serving {SERVER_NAME} over {transport}")
        await mcp.run_async(transport=transport)


@click.command()
@click.option("--api-url", default=None, help="Override AUTHN8_API_URL")
@click.option("--log-level", default=None, help="Override AUTHN8_LOG_LEVEL")
@click.option(
    "--transport",
    type=click.Choice(["stdio", "http", "sse"]),
    default="stdio",
    show_default=True,
    help="MCP transport to serve on",
)
def main(api_url: str | None, log_level: str | None, transport: str) -> None:
    """Run the Authn8 MCP server."""
    load_dotenv()
    overrides = {"api_url": api_url, "log_level": log_level}
    settings = Authn8Settings(**{k: v for k, v in overrides.items() if v})

    # stdout carries the stdio transport
    logging.basicConfig(level=settings.log_level.upper(), stream=sys.stderr)

    try:
        asyncio.run(serve(settings, transport=transport))
    except Authn8Error as exc:
        click.echo(f"Error: {exc.message}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
