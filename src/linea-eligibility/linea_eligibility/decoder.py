"""
Best-effort decoding of eligibility return payloads.

The target contract's return signature is not known in advance; it may be
`bool`, `uint256`, `(bool,uint256)` or `(uint256,bool)`. The decoder reads at
most two 32-byte words and guesses which one is the flag.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

WORD_HEX_CHARS = 64

_HEX_RE = re.compile(r"[0-9a-fA-F]*")


@dataclass(frozen=True)
class EligibilityResult:
    eligible: Optional[bool] = None
    amount: Optional[str] = None
    error: Optional[str] = None
    raw: Optional[str] = None

    @classmethod
    def failure(cls, message: str) -> "EligibilityResult":
        return cls(error=message)

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        if self.error is not None:
            return {"error": self.error}
        payload: Dict[str, Any] = {"eligible": bool(self.eligible)}
        if self.amount is not None:
            payload["amount"] = self.amount
        if self.raw is not None:
            payload["raw"] = self.raw
        return payload


def _word(raw: str, index: int) -> int:
    start = index * WORD_HEX_CHARS
    return int(raw[start:start + WORD_HEX_CHARS], 16)


def decode_eligibility(result_hex: str) -> EligibilityResult:
    raw = result_hex[2:] if result_hex.startswith("0x") else result_hex
    if not _HEX_RE.fullmatch(raw):
        raise ValueError("Result must be a hex string.")

    if len(raw) < WORD_HEX_CHARS:
        return EligibilityResult(eligible=False, raw=result_hex)

    n1 = _word(raw, 0)
    if len(raw) < 2 * WORD_HEX_CHARS:
        if n1 == 0:
            return EligibilityResult(eligible=False, raw=result_hex)
        if n1 == 1:
            return EligibilityResult(eligible=True, raw=result_hex)
        # Anything above 1 is read as an allocation, not a flag.
        return EligibilityResult(eligible=n1 > 0, amount=str(n1), raw=result_hex)

    n2 = _word(raw, 1)
    if n1 in (0, 1):
        return EligibilityResult(
            eligible=n1 == 1,
            amount=str(n2) if n2 > 0 else None,
            raw=result_hex,
        )
    if n2 in (0, 1):
        return EligibilityResult(
            eligible=n2 == 1,
            amount=str(n1) if n1 > 0 else None,
            raw=result_hex,
        )
    # Neither word is a clean boolean.
    return EligibilityResult(
        eligible=n1 > 0 or n2 > 0,
        amount=str(max(n1, n2)),
        raw=result_hex,
    )
