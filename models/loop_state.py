"""Modes and states of the interaction loop."""

from enum import Enum


class LoopMode(str, Enum):
    MANUAL = "manual"
    CONTINUOUS = "continuous"


class LoopState(str, Enum):
    """Where the interaction loop currently is.

    Manual mode cycles WAITING_FOR_KEY → CAPTURING → PROCESSING; continuous
    mode skips WAITING_FOR_KEY. IDLE before start, STOPPED once the stop event
    has been honoured.
    """

    IDLE = "idle"
    WAITING_FOR_KEY = "waiting_for_key"
    CAPTURING = "capturing"
    PROCESSING = "processing"
    STOPPED = "stopped"
