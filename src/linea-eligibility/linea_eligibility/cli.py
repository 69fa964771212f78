import argparse
import dataclasses
import json
import logging
import re
import sys
from typing import List, Optional

from .config import Config, load_config, resolve_mode
from .service import EligibilityService

_SPLIT_RE = re.compile(r"[\s,;]+")


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def read_address_file(path: str) -> List[str]:
    """Addresses separated by whitespace, commas or semicolons; `#` starts a comment."""
    out: List[str] = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.split("#", 1)[0]
            out.extend(token for token in _SPLIT_RE.split(line) if token)
    return out


def _apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    changes = {}
    if getattr(args, "mode", None):
        changes["fixed_mode"] = resolve_mode(args.mode)
    if getattr(args, "concurrency", None) and args.concurrency > 0:
        changes["concurrency"] = args.concurrency
    return dataclasses.replace(config, **changes) if changes else config


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linea-eligibility",
        description="Check Linea airdrop eligibility through a read-only contract call.",
        allow_abbrev=False,
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser("check", help="Check a batch of addresses")
    check_parser.add_argument(
        "--address",
        action="append",
        default=[],
        help="Address to check (0x-prefixed). Repeatable.",
    )
    check_parser.add_argument(
        "--file",
        required=False,
        help="File with addresses separated by newlines, spaces or commas.",
    )
    check_parser.add_argument(
        "--mode",
        required=False,
        help="Calling mode override: auto|address|sender|bytes32. Defaults to ELIG_ARG_MODE.",
    )
    check_parser.add_argument(
        "--concurrency",
        required=False,
        type=int,
        help="Worker count override. Defaults to LINEA_CONCURRENCY or 5.",
    )
    check_parser.add_argument(
        "--summary",
        action="store_true",
        help="Include eligible/not-eligible/error counts and the total allocation.",
    )

    decode_parser = subparsers.add_parser("decode", help="Decode a raw eth_call return value")
    decode_parser.add_argument(
        "--result",
        required=True,
        help="0x-prefixed hex returned by the eligibility function.",
    )

    encode_parser = subparsers.add_parser("encode", help="Show the eth_call objects for an address")
    encode_parser.add_argument(
        "--address",
        required=True,
        help="Address to encode (0x-prefixed).",
    )
    encode_parser.add_argument(
        "--mode",
        required=False,
        help="Single mode to encode: address|sender|bytes32. Defaults to all configured candidates.",
    )

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        if args.command == "check":
            config = _apply_overrides(load_config(), args)
            service = EligibilityService(config)
            addresses = list(args.address)
            if args.file:
                addresses.extend(read_address_file(args.file))
            result = service.check_batch(addresses, include_summary=args.summary)
            print(json.dumps(result, indent=2))
        elif args.command == "decode":
            service = EligibilityService(Config())
            print(json.dumps(service.decode_result(args.result), indent=2))
        elif args.command == "encode":
            service = EligibilityService(load_config())
            print(json.dumps(service.encode_calldata(args.address, args.mode), indent=2))
    except Exception as exc:  # pylint: disable=broad-except
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
