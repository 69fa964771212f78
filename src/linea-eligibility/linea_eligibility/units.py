from typing import Any, Dict, Mapping

from .decoder import EligibilityResult

TOKEN_DECIMALS = 18


def format_amount(amount: str, fraction_digits: int = 0, decimals: int = TOKEN_DECIMALS) -> str:
    """Render a smallest-unit amount as whole tokens with thousands separators.

    Fractional digits are truncated, not rounded, and trailing zeros dropped.
    """
    value = int(amount, 10)
    if value < 0:
        raise ValueError("amount must be non-negative.")
    whole, frac = divmod(value, 10**decimals)
    head = f"{whole:,}"
    if fraction_digits <= 0:
        return head
    frac_text = str(frac).rjust(decimals, "0")[:fraction_digits].rstrip("0")
    return f"{head}.{frac_text}" if frac_text else head


def summarize(results: Mapping[str, EligibilityResult]) -> Dict[str, Any]:
    eligible = 0
    not_eligible = 0
    errors = 0
    total = 0
    for result in results.values():
        if result.is_error:
            errors += 1
        elif result.eligible:
            eligible += 1
            if result.amount is not None:
                total += int(result.amount)
        else:
            not_eligible += 1

    return {
        "total": len(results),
        "eligible": eligible,
        "not_eligible": not_eligible,
        "errors": errors,
        "total_amount": str(total),
        "total_amount_tokens": format_amount(str(total), fraction_digits=TOKEN_DECIMALS),
    }
