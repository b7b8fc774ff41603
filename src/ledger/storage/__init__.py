"""
Storage Package

Persistence for ledger snapshots: the JSON snapshot store with its backup copy,
and the export/import envelope.
"""

from .datastore import LedgerStateStore
from .envelope import APP_ID, ENVELOPE_VERSION, InvalidEnvelopeError, build_envelope, parse_envelope

__all__ = [
    "APP_ID",
    "ENVELOPE_VERSION",
    "InvalidEnvelopeError",
    "LedgerStateStore",
    "build_envelope",
    "parse_envelope",
]
