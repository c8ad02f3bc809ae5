"""Common enums describing controller and session lifecycles."""

from enum import Enum


class LifecycleState(str, Enum):
    """Publisher lifecycle states.

    State Transition Flow:

    INIT → CONNECTING → RUNNING → DRAINING → CLOSED
                ↓           ↘
              CLOSED      DRAINING (shutdown requested while connecting)

    State Descriptions:
    - INIT: Controller created, nothing attempted yet.
    - CONNECTING: Room connection in flight.
    - RUNNING: Tracks published (best-effort) and capture loops started.
    - DRAINING: Shutdown observed; loops are stopped and joined, tracks unpublished.
    - CLOSED: Session released. Reached directly from CONNECTING when the
      connection fails.

    Terminal state: CLOSED
    """

    INIT = "init"
    CONNECTING = "connecting"
    RUNNING = "running"
    DRAINING = "draining"
    CLOSED = "closed"

    def __str__(self) -> str:
        return self.value


class SessionState(str, Enum):
    """Room session states as seen by the publisher."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    CLOSED = "closed"

    def __str__(self) -> str:
        return self.value


__all__ = ["LifecycleState", "SessionState"]
