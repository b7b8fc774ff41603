#!/usr/bin/env python3
"""
Export/Import Envelope

Exports wrap the ledger snapshot with a small header:

    {"version": 1, "createdAt": "...", "app": "finance-dashboard", "state": {...}}

Imports only check the header. The wrapped state is normalized like any other
persisted snapshot, so a structurally odd state is repaired rather than refused.
"""

from datetime import datetime, timezone
from typing import Any

from ..core.json_utils import parse_json
from ..core.models import LedgerState

ENVELOPE_VERSION = 1
APP_ID = "finance-dashboard"


class InvalidEnvelopeError(ValueError):
    """Raised when an import does not carry a valid envelope."""


def build_envelope(state: LedgerState, now: datetime | None = None) -> dict[str, Any]:
    """Wrap a ledger state for export."""
    created_at = (now or datetime.now(timezone.utc)).isoformat()
    return {
        "version": ENVELOPE_VERSION,
        "createdAt": created_at,
        "app": APP_ID,
        "state": state.to_dict(),
    }


def parse_envelope(data: Any) -> Any:
    """
    Validate an import envelope and return its state payload.

    Args:
        data: Envelope mapping or its JSON text

    Returns:
        The raw `state` value

    Raises:
        InvalidEnvelopeError: If the input is not an object, `version` is not a
            number, or `state` is missing
    """
    if isinstance(data, (str, bytes)):
        data = parse_json(data)
        if data is None:
            raise InvalidEnvelopeError("Import file is not valid JSON")

    if not isinstance(data, dict):
        raise InvalidEnvelopeError("Import must be a JSON object")

    version = data.get("version")
    if isinstance(version, bool) or not isinstance(version, (int, float)):
        raise InvalidEnvelopeError(f"Envelope version must be a number, got {version!r}")

    if "state" not in data:
        raise InvalidEnvelopeError("Envelope has no state")

    return data["state"]
