"""
Fallback dispatcher.

Dispatch logic:
  1. Attempt the requested model once
  2. On failure walk the fallback order, skipping the requested model
     and any key already attempted
  3. Return the first successful reply with the key that served it
  4. If every candidate fails, raise AllAttemptsExhausted with the last error

Attempts are sequential. Each one is bounded by its own timeout, and a
timeout counts as an ordinary failure.
"""

import asyncio
import math
import time
import logging
from typing import List, Optional, Tuple

import httpx

from relay.adapters.base import BaseModelAdapter
from relay.adapters.openrouter import extract_error_message
from relay.errors import AllAttemptsExhausted
from relay.models.dispatch import (
    AttemptResult,
    ChatRequest,
    DispatchResult,
    FallbackOrder,
    ModelRegistry,
)

logger = logging.getLogger("relay.dispatcher")

MALFORMED_REPLY = "Upstream response missing choices[0].message.content"


def describe_failure(exc: Exception, timeout: float) -> Tuple[Optional[int], str]:
    """Upstream status (if any) and a detail string for a failed attempt."""
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status, extract_error_message(exc.response) or f"Request failed with status code {status}"
    if isinstance(exc, (asyncio.TimeoutError, httpx.TimeoutException)):
        return None, f"timeout of {timeout:g}s exceeded"
    # httpx messages can carry the upstream URL
    if isinstance(exc, (httpx.HTTPError, httpx.InvalidURL)):
        return None, f"Upstream transport error ({type(exc).__name__})"
    return None, str(exc) or type(exc).__name__


class Dispatcher:
    def __init__(
        self,
        adapter: BaseModelAdapter,
        registry: ModelRegistry,
        fallback_order: FallbackOrder,
        timeout: float = 20.0,
        strict_reply_shape: bool = False,
    ):
        if not math.isfinite(timeout) or timeout <= 0:
            raise ValueError("timeout must be a finite positive number")
        self.adapter = adapter
        self.registry = registry
        self.fallback_order = fallback_order
        self.timeout = timeout
        self.strict_reply_shape = strict_reply_shape

    async def attempt(self, model_key: str, message: str) -> AttemptResult:
        """
        One upstream call for one model. Every failure mode, including the
        timeout, comes back as AttemptResult(success=False). Cancellation
        of the caller is not caught.
        """
        model_id = self.registry.resolve(model_key)
        start = time.perf_counter()

        try:
            result = await asyncio.wait_for(
                self.adapter.generate(model_id=model_id, message=message),
                timeout=self.timeout,
            )
        except Exception as e:
            latency_ms = (time.perf_counter() - start) * 1000
            status, detail = describe_failure(e, self.timeout)
            return AttemptResult.failed(model_key, detail, status=status, latency_ms=latency_ms)

        latency_ms = (time.perf_counter() - start) * 1000
        reply = result.get("response") if isinstance(result, dict) else None

        if reply is None:
            if self.strict_reply_shape:
                return AttemptResult.failed(model_key, MALFORMED_REPLY, latency_ms=latency_ms)
            reply = ""

        return AttemptResult.ok(model_key, reply, latency_ms=latency_ms)

    async def dispatch(self, request: ChatRequest) -> DispatchResult:
        start_time = time.time()
        attempts: List[AttemptResult] = []

        result = await self.attempt(request.model_key, request.message)
        attempts.append(result)

        if not result.success:
            logger.warning(
                f"[Dispatch] ✗ {request.model_key} failed "
                f"(status={result.status}): {result.error}, switching..."
            )

            for alt in self.fallback_order.candidates(request.model_key):
                logger.info(f"[Dispatch] Trying fallback: {alt}")
                result = await self.attempt(alt, request.message)
                attempts.append(result)
                if result.success:
                    break
                logger.warning(f"[Dispatch] ✗ {alt} failed (status={result.status}): {result.error}")

        latency_ms = (time.time() - start_time) * 1000

        if not result.success:
            logger.critical(
                f"[Dispatch] All {len(attempts)} attempts exhausted after {latency_ms:.0f}ms."
            )
            raise AllAttemptsExhausted(details=self._last_error(attempts))

        logger.info(
            f"[Dispatch] ✓ {result.model_key} | {latency_ms:.0f}ms | "
            f"attempts={len(attempts)}"
        )

        return DispatchResult(
            reply=result.reply,
            served_by=result.model_key,
            attempts=tuple(attempts),
        )

    @staticmethod
    def _last_error(attempts: List[AttemptResult]) -> Optional[str]:
        return attempts[-1].error if attempts else None
