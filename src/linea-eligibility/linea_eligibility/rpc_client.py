import itertools
import logging
import re
import threading
from typing import Any, Dict, List, Optional

import requests

from .config import DEFAULT_REQUEST_TIMEOUT
from .errors import RevertError, TransportError

logger = logging.getLogger(__name__)

EXECUTION_ERROR_CODE = -32000
_REVERT_RE = re.compile(r"revert", re.IGNORECASE)
_HEX_RESULT_RE = re.compile(r"0x[0-9a-fA-F]*")


def is_revert_error(code: Any, message: Any, data: Any) -> bool:
    """Classify a JSON-RPC error object as an execution revert."""
    if code == EXECUTION_ERROR_CODE:
        return True
    if message and _REVERT_RE.search(str(message)):
        return True
    return isinstance(data, str) and data.startswith("0x")


class RpcClient:
    """JSON-RPC 2.0 client for read-only eth_call against one EVM node.

    Each call is a single HTTP POST bounded by `timeout`; there are no
    retries. Sessions are kept per thread so one client can serve a
    worker pool.
    """

    def __init__(
        self,
        rpc_url: str,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        url = (rpc_url or "").strip()
        if not url:
            raise ValueError("rpc_url must be a non-empty string.")

        self.rpc_url = url
        self.timeout = timeout
        self.headers = {"Content-Type": "application/json", "Cache-Control": "no-store"}
        if headers:
            self.headers.update(dict(headers))
        self._ids = itertools.count(1)
        self._id_lock = threading.Lock()
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.headers.update(self.headers)
            self._local.session = session
        return session

    def close(self) -> None:
        session = getattr(self._local, "session", None)
        if session is not None:
            session.close()
            self._local.session = None

    def _next_id(self) -> int:
        with self._id_lock:
            return next(self._ids)

    def call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        if not isinstance(method, str) or not method.strip():
            raise ValueError("method must be a non-empty string.")
        if params is None:
            params = []
        if not isinstance(params, list):
            raise ValueError("params must be a list.")

        payload = {
            "jsonrpc": "2.0",
            "id": self._next_id(),
            "method": method,
            "params": params,
        }

        try:
            response = self.session.post(self.rpc_url, json=payload, timeout=self.timeout)
        except requests.Timeout as exc:
            raise TransportError(f"RPC timeout after {self.timeout}s.") from exc
        except requests.RequestException as exc:
            raise TransportError(f"RPC request failed: {exc}") from exc

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        error_obj = data.get("error")
        if not response.ok or error_obj:
            if not isinstance(error_obj, dict):
                error_obj = {}
            code = error_obj.get("code", response.status_code)
            message = error_obj.get("message") or f"RPC HTTP {response.status_code}"
            err_data = error_obj.get("data")
            details = {"code": code, "message": message, "data": err_data}
            if is_revert_error(code, message, err_data):
                raise RevertError("REVERT", details=details)
            logger.warning("RPC error from %s: %s: %s", method, code, message)
            raise TransportError(f"{code}: {message}", details=details)

        result = data.get("result")
        if not result:
            raise TransportError("Empty result")
        return result

    def eth_call(self, to: str, data: str, from_: Optional[str] = None, block_tag: str = "latest") -> str:
        tx: Dict[str, str] = {"to": to, "data": data}
        if from_:
            tx["from"] = from_
        result = self.call("eth_call", [tx, block_tag])
        if not isinstance(result, str) or not _HEX_RESULT_RE.fullmatch(result):
            raise TransportError("Malformed eth_call result (expected 0x-prefixed hex).")
        return result
