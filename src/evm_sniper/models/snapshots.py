"""JSON-serializable snapshots for health checks."""

from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass
class ServiceStatus:
    """Point-in-time view of the sniper pipeline."""

    running: bool
    active_targets: int
    queue_depth: int
    is_draining: bool
    has_live_connection: bool
    events_received: int = 0
    events_rejected: int = 0
    transfers_decoded: int = 0
    decode_failures: int = 0
    pools_seen: int = 0
    snipes_dispatched: int = 0
    queue_dropped: int = 0

    def to_dict(self) -> dict:
        return asdict(self)
