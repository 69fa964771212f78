import logging
from typing import Optional, Protocol

from .calldata import CallingMode, build_call
from .config import Config
from .decoder import EligibilityResult, decode_eligibility
from .errors import EligibilityError, RevertError, TransportError

logger = logging.getLogger(__name__)


class EthCaller(Protocol):
    def eth_call(self, to: str, data: str, from_: Optional[str] = None, block_tag: str = "latest") -> str:
        ...

    def close(self) -> None:
        ...


class ModeResolver:
    """Resolve one address by probing calling modes until one does not revert."""

    def __init__(self, config: Config, client: EthCaller) -> None:
        self.config = config
        self.client = client

    def close(self) -> None:
        """Close the client's HTTP session held by the calling thread."""
        self.client.close()

    def try_mode(self, address: str, mode: CallingMode) -> EligibilityResult:
        call = build_call(mode, self.config.selector, self.config.contract, address)
        logger.debug("eth_call %s mode=%s", address, mode.value)
        result_hex = self.client.eth_call(call["to"], call["data"], from_=call.get("from"))
        return decode_eligibility(result_hex)

    def resolve(self, address: str) -> EligibilityResult:
        self.config.ensure_complete()

        last_error: Optional[EligibilityError] = None
        for mode in self.config.candidate_modes:
            try:
                return self.try_mode(address, mode)
            except (RevertError, TransportError) as exc:
                last_error = exc
                if not exc.is_revert and not self.config.is_auto:
                    break

        if last_error is None or last_error.is_revert:
            # Every calling convention reverted.
            return EligibilityResult(eligible=False)
        logger.warning("Resolution failed for %s: %s", address, last_error.message)
        return EligibilityResult.failure(last_error.message)
