from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class NegotiationError(Exception):
    """Structured error for negotiation contract violations.

    Raised only when the session manager breaks the protocol (wrong terms
    variant, empty round history, illegal phase change). Ordinary game states
    never raise; they resolve to a response.
    """

    code: str
    message: str
    details: Optional[Any] = None

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.code}: {self.message}"


# Error codes (stable API surface)
NEGOTIATION_TERMS_MISMATCH = "NEGOTIATION_TERMS_MISMATCH"
NEGOTIATION_NO_ROUNDS = "NEGOTIATION_NO_ROUNDS"
NEGOTIATION_ILLEGAL_TRANSITION = "NEGOTIATION_ILLEGAL_TRANSITION"
NEGOTIATION_OUT_OF_TURN = "NEGOTIATION_OUT_OF_TURN"
NEGOTIATION_ULTIMATUM_VIOLATION = "NEGOTIATION_ULTIMATUM_VIOLATION"
NEGOTIATION_BAD_PAYLOAD = "NEGOTIATION_BAD_PAYLOAD"
NEGOTIATION_UNKNOWN_KIND = "NEGOTIATION_UNKNOWN_KIND"
