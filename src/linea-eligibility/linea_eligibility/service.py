import logging
from typing import Any, Dict, List, Optional, Tuple

from .calldata import build_call, parse_mode
from .config import Config
from .decoder import decode_eligibility
from .errors import ConfigurationError, EligibilityError, ValidationError
from .resolver import ModeResolver
from .rpc_client import RpcClient
from .scheduler import BatchScheduler, prepare_batch
from .units import summarize

logger = logging.getLogger(__name__)


class EligibilityService:
    """Combine configuration, RPC client, resolver and scheduler to serve eligibility checks."""

    def __init__(self, config: Config, client: Optional[Any] = None) -> None:
        self.config = config
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self.config.ensure_complete()
            self._client = RpcClient(self.config.rpc_url, timeout=self.config.request_timeout)
        return self._client

    def _scheduler(self) -> BatchScheduler:
        resolver = ModeResolver(self.config, self.client)
        return BatchScheduler(self.config, resolver)

    def check_batch(self, addresses: Any, include_summary: bool = False) -> Dict[str, Any]:
        batch = prepare_batch(addresses, self.config.max_batch_size)
        self.config.ensure_complete()
        results = self._scheduler().run(batch)

        response: Dict[str, Any] = {
            "success": True,
            "results": {address: results[address].to_dict() for address in batch},
        }
        if include_summary:
            response["summary"] = summarize(results)
        return response

    def check_address(self, address: str) -> Dict[str, Any]:
        (normalized,) = prepare_batch([address], 1)
        result = ModeResolver(self.config, self.client).resolve(normalized)
        return {"address": normalized, "mode": self.config.mode_label, **result.to_dict()}

    def decode_result(self, result_hex: str) -> Dict[str, Any]:
        if not isinstance(result_hex, str):
            raise ValidationError("result must be a hex string.")
        try:
            decoded = decode_eligibility(result_hex.strip())
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        return decoded.to_dict()

    def encode_calldata(self, address: str, mode: Optional[str] = None) -> Dict[str, Any]:
        """Show the eth_call object(s) that would be sent for an address."""
        if not self.config.selector or not self.config.contract:
            raise ConfigurationError("Missing env (ELIG_CONTRACT, ELIG_FUNC_SELECTOR).")
        (normalized,) = prepare_batch([address], 1)
        if mode:
            try:
                modes = [parse_mode(mode)]
            except ValueError as exc:
                raise ValidationError(str(exc)) from exc
        else:
            modes = list(self.config.candidate_modes)

        calls: List[Dict[str, Any]] = []
        for candidate in modes:
            call = build_call(candidate, self.config.selector, self.config.contract, normalized)
            calls.append({"mode": candidate.value, **call})
        return {"address": normalized, "calls": calls}

    def handle_batch_request(self, payload: Any) -> Tuple[int, Dict[str, Any]]:
        """Map a batch request body to an HTTP status code and JSON body."""
        addresses = payload.get("addresses") if isinstance(payload, dict) else None
        try:
            return 200, self.check_batch(addresses)
        except ValidationError as exc:
            return 400, {"success": False, "error": exc.to_dict()}
        except EligibilityError as exc:
            logger.error("Batch request failed: %s", exc.message)
            return 500, {"success": False, "error": exc.to_dict()}
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception("Unexpected failure handling batch request")
            return 500, {"success": False, "error": {"message": str(exc) or "Internal error"}}


METHOD_NOT_ALLOWED = {"error": {"message": "Method not allowed"}}
