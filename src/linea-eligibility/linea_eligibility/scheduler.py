import logging
import queue
import re
import threading
import time
from typing import Any, Dict, Iterable, List

from .config import DEFAULT_MAX_BATCH_SIZE, Config
from .decoder import EligibilityResult
from .errors import ConfigurationError, ValidationError
from .resolver import ModeResolver

logger = logging.getLogger(__name__)

ADDRESS_PATTERN = re.compile(r"^0x[0-9a-f]{40}$")
MAX_REPORTED_INVALID = 5


def normalize_address(address: str) -> str:
    return address.strip().lower()


def prepare_batch(addresses: Any, max_size: int = DEFAULT_MAX_BATCH_SIZE) -> List[str]:
    """Normalize, dedupe and validate a batch; any malformed entry rejects it all."""
    if not isinstance(addresses, (list, tuple)) or not addresses:
        raise ValidationError("addresses[] is required")

    unique: Dict[str, None] = {}
    invalid: List[str] = []
    for entry in addresses:
        if not isinstance(entry, str):
            invalid.append(repr(entry))
            continue
        normalized = normalize_address(entry)
        if normalized in unique:
            continue
        if not ADDRESS_PATTERN.match(normalized):
            if normalized not in invalid:
                invalid.append(normalized)
            continue
        unique[normalized] = None

    if invalid:
        raise ValidationError(
            "Invalid addresses",
            details={"invalid": invalid[:MAX_REPORTED_INVALID]},
        )
    if len(unique) > max_size:
        raise ValidationError(
            f"Too many addresses. Maximum {max_size} per request",
            details={"count": len(unique), "max": max_size},
        )
    return list(unique)


class BatchScheduler:
    """Fixed pool of worker threads draining a shared address queue."""

    def __init__(self, config: Config, resolver: ModeResolver) -> None:
        self.config = config
        self.resolver = resolver

    def run(self, addresses: Iterable[str]) -> Dict[str, EligibilityResult]:
        self.config.ensure_complete()

        pending: "queue.Queue[str]" = queue.Queue()
        count = 0
        for address in addresses:
            pending.put(address)
            count += 1

        results: Dict[str, EligibilityResult] = {}
        lock = threading.Lock()
        workers = max(1, min(self.config.concurrency, count))
        logger.info("Checking %d addresses with %d workers (mode=%s)", count, workers, self.config.mode_label)

        threads = [
            threading.Thread(
                target=self._drain,
                args=(pending, results, lock),
                name=f"eligibility-worker-{i}",
                daemon=True,
            )
            for i in range(workers)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        errors = sum(1 for r in results.values() if r.is_error)
        logger.info("Batch finished: %d results, %d errors", len(results), errors)
        return results

    def _drain(
        self,
        pending: "queue.Queue[str]",
        results: Dict[str, EligibilityResult],
        lock: threading.Lock,
    ) -> None:
        try:
            while True:
                try:
                    address = pending.get_nowait()
                except queue.Empty:
                    return

                try:
                    result = self.resolver.resolve(address)
                except ConfigurationError as exc:
                    result = EligibilityResult.failure(exc.message)
                except Exception as exc:  # pylint: disable=broad-except
                    logger.exception("Unexpected failure while checking %s", address)
                    result = EligibilityResult.failure(str(exc) or exc.__class__.__name__)
                    with lock:
                        results[address] = result
                    time.sleep(self.config.cooldown_seconds)
                    continue

                with lock:
                    results[address] = result
        finally:
            # Release this worker's HTTP session before the thread exits.
            self.resolver.close()
