"""Lifecycle state machine for the publisher controller."""

from room_publisher.schemas import LifecycleState


class LifecycleStateMachine:
    """State machine for the controller's lifecycle transitions.

    State flow with triggers:
    - INIT -> CONNECTING (run() called with url and token)
    - CONNECTING -> RUNNING (connected; tracks published, capture loops started)
      | CLOSED (connection failed)
      | DRAINING (shutdown requested before the connection resolved)
    - RUNNING -> DRAINING (shutdown signal observed by the poll loop)
    - DRAINING -> CLOSED (loops joined, tracks unpublished, session released)
    - CLOSED is terminal
    """

    TRANSITIONS: dict[LifecycleState, set[LifecycleState]] = {
        LifecycleState.INIT: {LifecycleState.CONNECTING},
        LifecycleState.CONNECTING: {
            LifecycleState.RUNNING,
            LifecycleState.DRAINING,
            LifecycleState.CLOSED,
        },
        LifecycleState.RUNNING: {LifecycleState.DRAINING},
        LifecycleState.DRAINING: {LifecycleState.CLOSED},
        LifecycleState.CLOSED: set(),
    }

    TERMINAL_STATES: set[LifecycleState] = {LifecycleState.CLOSED}

    @classmethod
    def can_transition(cls, current: LifecycleState, new: LifecycleState) -> bool:
        """Check if state transition is valid.

        Args:
            current: Current lifecycle state
            new: Target state to transition to

        Returns:
            True if transition is valid, False otherwise
        """
        return new in cls.TRANSITIONS.get(current, set())

    @classmethod
    def is_terminal(cls, state: LifecycleState) -> bool:
        return state in cls.TERMINAL_STATES

    @classmethod
    def get_valid_transitions(cls, state: LifecycleState) -> set[LifecycleState]:
        return cls.TRANSITIONS.get(state, set())
