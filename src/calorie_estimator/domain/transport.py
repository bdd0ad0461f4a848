"""Models for provider transport attempts."""

from dataclasses import dataclass

ATTEMPT_BINARY = "binary"
ATTEMPT_JSON = "json"


@dataclass(frozen=True)
class ProviderReply:
    """Raw HTTP reply from the calorie provider.

    ``status_code`` is ``None`` when the request never produced a response;
    ``error`` then describes the transport failure.
    """

    status_code: int | None
    body: str
    error: str | None = None

    @property
    def ok(self) -> bool:
        """Return true for 2xx replies."""
        return self.status_code is not None and 200 <= self.status_code < 300


@dataclass(frozen=True)
class AttemptSucceeded:
    """Attempt that produced a usable provider payload."""

    attempt: str
    payload: object


@dataclass(frozen=True)
class AttemptFailed:
    """Attempt that did not produce a usable payload."""

    attempt: str
    reason: str
    status_code: int | None = None
    body: str = ""

    @property
    def details(self) -> str:
        """Return upstream diagnostic text for operators."""
        return self.body or self.reason


AttemptResult = AttemptSucceeded | AttemptFailed
