"""
MCP server exposing Linea airdrop eligibility checks, plus the HTTP batch endpoint.
"""

import argparse
import logging
from typing import Any, Optional

from mcp.server.fastmcp import FastMCP
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse

from .config import load_config
from .errors import EligibilityError, ValidationError
from .service import METHOD_NOT_ALLOWED, EligibilityService

BATCH_PATH = "/api/linea/batch"

logger = logging.getLogger(__name__)

server = FastMCP(
    name="linea-eligibility",
    instructions="Check Linea airdrop eligibility for EVM addresses via a read-only contract call.",
)

_service: Optional[EligibilityService] = None


def _get_service() -> EligibilityService:
    global _service
    if _service is None:
        _service = EligibilityService(load_config())
    return _service


def _normalize_addresses_param(value: Optional[Any]) -> list:
    """Accept a list of addresses, or a single address string as a one-element batch."""
    if value is None:
        raise ValidationError("addresses[] is required")
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return list(value)
    raise ValidationError("addresses must be an array of 0x-prefixed strings.")


@server.tool(
    name="check_eligibility",
    title="Check Eligibility (Batch)",
    description="Check up to 1000 addresses against the configured eligibility contract. Returns per-address results and a summary.",
)
def check_eligibility(addresses: Any) -> dict:
    svc = _get_service()
    return svc.check_batch(_normalize_addresses_param(addresses), include_summary=True)


@server.tool(
    name="check_address",
    title="Check Single Address",
    description="Resolve eligibility for one address, probing calling modes as configured.",
)
def check_address(address: str) -> dict:
    svc = _get_service()
    return svc.check_address(address)


@server.tool(
    name="decode_result",
    title="Decode Eligibility Result",
    description="Decode a raw eth_call return (0x hex, 1-2 words) into eligible/amount.",
)
def decode_result(result_hex: str) -> dict:
    svc = _get_service()
    return svc.decode_result(result_hex)


@server.tool(
    name="encode_calldata",
    title="Encode Eligibility Call",
    description="Show the eth_call objects sent for an address. mode: address|sender|bytes32 (default: configured policy).",
)
def encode_calldata(address: str, mode: Optional[str] = None) -> dict:
    svc = _get_service()
    return svc.encode_calldata(address, mode)


@server.custom_route(BATCH_PATH, methods=["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"])
async def batch_endpoint(request: Request) -> JSONResponse:
    if request.method != "POST":
        return JSONResponse(METHOD_NOT_ALLOWED, status_code=405)

    try:
        payload = await request.json()
    except ValueError:
        payload = {}

    try:
        svc = _get_service()
    except EligibilityError as exc:
        logger.error("Service configuration failed: %s", exc.message)
        return JSONResponse({"success": False, "error": exc.to_dict()}, status_code=500)

    status, body = await run_in_threadpool(svc.handle_batch_request, payload)
    return JSONResponse(body, status_code=status, headers={"Cache-Control": "no-store"})


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the Linea eligibility MCP server.")
    parser.add_argument(
        "--transport",
        choices=["stdio", "sse", "streamable-http"],
        default="stdio",
        help="Transport protocol for MCP. The HTTP batch endpoint is served by sse/streamable-http.",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host for SSE/HTTP transports.",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port for SSE/HTTP transports.",
    )
    parser.add_argument(
        "--mount-path",
        default="/",
        help="Mount path for SSE transport (only when transport=sse).",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    # FastMCP uses host/port only for SSE/HTTP transports; stdio ignores them.
    server.settings.host = args.host
    server.settings.port = args.port

    if args.transport == "sse":
        server.run(transport="sse", mount_path=args.mount_path)
    else:
        server.run(transport=args.transport)


if __name__ == "__main__":
    main()
