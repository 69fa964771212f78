import os
from dataclasses import dataclass
from typing import Optional, Tuple

from .calldata import CallingMode, parse_mode
from .errors import ConfigurationError

AUTO_MODE = "auto"
AUTO_ORDER: Tuple[CallingMode, ...] = (
    CallingMode.ADDRESS,
    CallingMode.SENDER,
    CallingMode.BYTES32,
)

DEFAULT_CONCURRENCY = 5
DEFAULT_REQUEST_TIMEOUT = 15.0
DEFAULT_COOLDOWN_SECONDS = 0.12
DEFAULT_MAX_BATCH_SIZE = 1000


@dataclass(frozen=True)
class Config:
    rpc_url: str = ""
    contract: str = ""
    selector: str = ""
    fixed_mode: Optional[CallingMode] = None
    concurrency: int = DEFAULT_CONCURRENCY
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS
    max_batch_size: int = DEFAULT_MAX_BATCH_SIZE

    @property
    def is_auto(self) -> bool:
        return self.fixed_mode is None

    @property
    def mode_label(self) -> str:
        return AUTO_MODE if self.fixed_mode is None else self.fixed_mode.value

    @property
    def candidate_modes(self) -> Tuple[CallingMode, ...]:
        if self.fixed_mode is None:
            return AUTO_ORDER
        return (self.fixed_mode,)

    def missing_fields(self) -> list[str]:
        missing: list[str] = []
        if not self.rpc_url:
            missing.append("LINEA_RPC_URL")
        if not self.contract:
            missing.append("ELIG_CONTRACT")
        if not self.selector:
            missing.append("ELIG_FUNC_SELECTOR")
        return missing

    def ensure_complete(self) -> None:
        """Raise ConfigurationError if the RPC endpoint, contract or selector is unset."""
        missing = self.missing_fields()
        if missing:
            raise ConfigurationError(
                f"Missing env ({', '.join(missing)}).",
                details={"missing": missing},
            )


def resolve_mode(value: Optional[str]) -> Optional[CallingMode]:
    """Return None for auto-probing, otherwise the single fixed calling mode."""
    normalized = (value or AUTO_MODE).strip().lower()
    if not normalized or normalized == AUTO_MODE:
        return None
    try:
        return parse_mode(normalized)
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc


def _positive_int(raw: Optional[str], default: int) -> int:
    try:
        value = int((raw or "").strip())
    except ValueError:
        return default
    return value if value > 0 else default


def _positive_float(raw: Optional[str], default: float) -> float:
    try:
        value = float((raw or "").strip())
    except ValueError:
        return default
    return value if value > 0 else default


def load_config() -> Config:
    """Load configuration from environment variables.

    Mandatory values may be missing here; callers check them with
    Config.ensure_complete() before touching the RPC endpoint.
    """
    rpc_url = os.getenv("LINEA_RPC_URL", "").strip()
    contract = os.getenv("ELIG_CONTRACT", "").strip().lower()
    selector = os.getenv("ELIG_FUNC_SELECTOR", "").strip().lower()
    fixed_mode = resolve_mode(os.getenv("ELIG_ARG_MODE"))
    concurrency = _positive_int(os.getenv("LINEA_CONCURRENCY"), DEFAULT_CONCURRENCY)
    timeout = _positive_float(os.getenv("RPC_TIMEOUT_SECONDS"), DEFAULT_REQUEST_TIMEOUT)
    # Zero is a valid cooldown, so this one is parsed separately.
    cooldown_raw = os.getenv("ELIG_COOLDOWN_SECONDS")
    try:
        cooldown = max(0.0, float(cooldown_raw)) if cooldown_raw else DEFAULT_COOLDOWN_SECONDS
    except ValueError:
        cooldown = DEFAULT_COOLDOWN_SECONDS
    max_batch = _positive_int(os.getenv("ELIG_MAX_BATCH_SIZE"), DEFAULT_MAX_BATCH_SIZE)

    return Config(
        rpc_url=rpc_url,
        contract=contract,
        selector=selector,
        fixed_mode=fixed_mode,
        concurrency=concurrency,
        request_timeout=timeout,
        cooldown_seconds=cooldown,
        max_batch_size=max_batch,
    )
