"""Two-stage request protocol for the calorie provider."""

import base64
import json
import logging
import math
from dataclasses import dataclass

from calorie_estimator.adapters.calorie_provider_client import CalorieProviderClient
from calorie_estimator.domain.transport import (
    ATTEMPT_BINARY,
    ATTEMPT_JSON,
    AttemptFailed,
    AttemptResult,
    AttemptSucceeded,
    ProviderReply,
)

_logger = logging.getLogger(__name__)


class ProviderTransportError(RuntimeError):
    """Raised when both request formats were rejected by the provider."""

    def __init__(self, failure: AttemptFailed) -> None:
        super().__init__(f"Calorie provider request failed: {failure.reason}")
        self.status_code = failure.status_code
        self.details = failure.details


@dataclass
class TransportNegotiator:
    """Tries a binary upload first and a JSON/base64 upload second.

    Attempts run sequentially; the second one only runs when the first
    returned a failure. There are no further retries.
    """

    client: CalorieProviderClient

    async def negotiate(self, image_bytes: bytes) -> AttemptSucceeded:
        """Return the first usable provider payload."""
        first = await self.attempt_binary(image_bytes)
        if isinstance(first, AttemptSucceeded):
            return first
        _logger.warning(
            "Binary attempt failed, falling back to JSON base64: %s",
            first.reason,
            extra={"status_code": first.status_code},
        )

        second = await self.attempt_json(image_bytes)
        if isinstance(second, AttemptSucceeded):
            return second
        _logger.error(
            "JSON fallback failed: %s",
            second.reason,
            extra={"status_code": second.status_code},
        )
        raise ProviderTransportError(second)

    async def attempt_binary(self, image_bytes: bytes) -> AttemptResult:
        """Send raw bytes; success needs a 2xx status and a non-empty JSON body."""
        reply = await self.client.post_image(image_bytes)
        return _evaluate(reply, ATTEMPT_BINARY, require_json=True)

    async def attempt_json(self, image_bytes: bytes) -> AttemptResult:
        """Send base64 JSON; any 2xx status counts as success."""
        encoded = base64.b64encode(image_bytes).decode("ascii")
        reply = await self.client.post_base64(encoded)
        return _evaluate(reply, ATTEMPT_JSON, require_json=False)


def _evaluate(
    reply: ProviderReply, attempt: str, *, require_json: bool
) -> AttemptResult:
    """Classify a provider reply as a tagged attempt result."""
    if reply.status_code is None:
        return AttemptFailed(
            attempt=attempt, reason=reply.error or "no response from provider"
        )
    if not reply.ok:
        return AttemptFailed(
            attempt=attempt,
            reason=f"HTTP {reply.status_code}",
            status_code=reply.status_code,
            body=reply.body,
        )
    try:
        payload = parse_json_body(reply.body)
    except (ValueError, RecursionError):
        if require_json:
            return AttemptFailed(
                attempt=attempt,
                reason="non-JSON response body",
                status_code=reply.status_code,
                body=reply.body,
            )
        _logger.warning(
            "Calorie provider returned non-JSON response",
            extra={"attempt": attempt, "status_code": reply.status_code},
        )
        payload = None
    if require_json and _is_falsy(payload):
        return AttemptFailed(
            attempt=attempt,
            reason="empty JSON payload",
            status_code=reply.status_code,
            body=reply.body,
        )
    return AttemptSucceeded(attempt=attempt, payload=payload)


def parse_json_body(body: str) -> object:
    """Parse a provider body, rejecting NaN, Infinity and overflowing floats.

    Payloads are echoed back to callers, so they must stay serializable as
    strict JSON.
    """
    return json.loads(body, parse_constant=_reject_constant, parse_float=_finite_float)


def _reject_constant(name: str) -> float:
    raise ValueError(f"non-finite JSON constant {name}")


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"non-finite JSON number {text}")
    return value


def _is_falsy(payload: object) -> bool:
    """Return true for null, false, zero and empty-string bodies."""
    return payload in (None, False, 0, "")
