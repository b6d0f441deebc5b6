"""
Error taxonomy for the store, the chat platform and the interactions endpoint.

Slot-level outcomes (no longer available, expired) are not exceptions: they are ClaimStatus
values returned by the reservation service and shown to the user as ephemeral notices.
"""
from __future__ import annotations

from fastapi import HTTPException

STATUS_UNAUTHORIZED = 401

# Discord JSON error code for "Unknown Message"
DISCORD_UNKNOWN_MESSAGE = 10008


class StoreUnavailable(Exception):
    """Network, HTTP or auth failure talking to the spreadsheet. The current cycle is aborted."""


class StoreInconsistent(Exception):
    """A tab expected after an ensure step is missing. Fatal for the current cycle only."""


class ChatPlatformError(Exception):
    """Discord REST call failed."""

    def __init__(self, message: str, *, status_code: int | None = None, code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class UIMessageMissing(ChatPlatformError):
    """The canonical message of a view was deleted outside the bot. Recovered by re-sending."""


class InvalidInteractionSignature(Exception):
    """Ed25519 signature on an incoming interaction did not verify."""


def signature_error_to_http(exc: InvalidInteractionSignature) -> HTTPException:
    return HTTPException(status_code=STATUS_UNAUTHORIZED, detail=str(exc) or "invalid request signature")
