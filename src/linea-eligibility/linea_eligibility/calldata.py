from enum import Enum
from typing import Dict, Optional

from eth_utils import keccak


class CallingMode(str, Enum):
    """How the target address is handed to the eligibility function."""

    ADDRESS = "address"
    SENDER = "sender"
    BYTES32 = "bytes32"


MODE_ALIASES = {
    "address": CallingMode.ADDRESS,
    "address-arg": CallingMode.ADDRESS,
    "sender": CallingMode.SENDER,
    "sender-arg": CallingMode.SENDER,
    "bytes32": CallingMode.BYTES32,
    "bytes32-leaf-arg": CallingMode.BYTES32,
}


def parse_mode(value: str) -> CallingMode:
    normalized = (value or "").strip().lower()
    mode = MODE_ALIASES.get(normalized)
    if mode is None:
        allowed = ", ".join(sorted(MODE_ALIASES))
        raise ValueError(f"Unknown calling mode '{value}'. Supported: auto, {allowed}.")
    return mode


def _strip_0x(value: str) -> str:
    return value[2:] if value.startswith("0x") else value


def _pad32(hex_body: str) -> str:
    return hex_body.lower().rjust(64, "0")


def encode_address_arg(selector: str, address: str) -> str:
    """Selector followed by the address as a single left-padded ABI word."""
    return "0x" + _strip_0x(selector) + _pad32(_strip_0x(address))


def encode_sender_arg(selector: str) -> str:
    # The address travels as the call's `from`, not in calldata.
    return "0x" + _strip_0x(selector)


def encode_bytes32_leaf_arg(selector: str, address: str) -> str:
    """Selector followed by keccak-256 of the raw 20 address bytes."""
    leaf = keccak(bytes.fromhex(_strip_0x(address)))
    return "0x" + _strip_0x(selector) + leaf.hex()


def build_call(mode: CallingMode, selector: str, contract: str, address: str) -> Dict[str, str]:
    """Build the eth_call transaction object for one calling mode."""
    sender: Optional[str] = None
    if mode is CallingMode.ADDRESS:
        data = encode_address_arg(selector, address)
    elif mode is CallingMode.SENDER:
        data = encode_sender_arg(selector)
        sender = address
    elif mode is CallingMode.BYTES32:
        data = encode_bytes32_leaf_arg(selector, address)
    else:
        raise ValueError(f"Unsupported calling mode {mode!r}.")

    call = {"to": contract, "data": data}
    if sender:
        call["from"] = sender
    return call
