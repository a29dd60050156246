"""Services module for business logic."""

from src.services.quota import QuotaTracker, UsageRecord, client_id_from
from src.services.relay import OutcomeKind, QueryRelay, RelayOutcome

__all__ = [
    "OutcomeKind",
    "QueryRelay",
    "QuotaTracker",
    "RelayOutcome",
    "UsageRecord",
    "client_id_from",
]
