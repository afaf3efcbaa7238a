"""Metadata and error envelopes attached to every tool response."""

from typing import Any

from stock_signals import SCHEMA_VERSION, SERVER_VERSION

DATA_PROVIDER = "financialdatasets.ai"


def build_meta(tool: str, duration_ms: float | None = None) -> dict[str, Any]:
    """
    Metadata block for a response.

    Args:
        tool: Tool or orchestration step that produced the payload
        duration_ms: Wall time in milliseconds, omitted when None
    """
    meta: dict[str, Any] = {
        "server_version": SERVER_VERSION,
        "schema_version": SCHEMA_VERSION,
        "data_provider": DATA_PROVIDER,
        "tool": tool,
    }
    if duration_ms is not None:
        meta["duration_ms"] = round(duration_ms, 1)
    return meta


def build_error_response(
    error_type: str,
    message: str,
    symbol: str | None = None,
) -> dict[str, Any]:
    """
    Error envelope returned by tools instead of raising.

    error_type is one of invalid_symbol, invalid_request, missing_data or
    data_unavailable.
    """
    response: dict[str, Any] = {
        "error": True,
        "error_type": error_type,
        "message": message,
        "meta": build_meta("error"),
    }
    if symbol is not None:
        response["symbol"] = symbol
    return response
