"""Typed errors raised by the planner core."""

from typing import Optional


class PlannerError(Exception):
    """Base class for errors surfaced to the agent as structured failures."""

    kind = "PlannerError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error_kind": self.kind, "error": self.message}


class Unauthenticated(PlannerError):
    """No valid principal for the current session."""

    kind = "Unauthenticated"


class InvalidRange(PlannerError):
    """Query range is malformed (unparseable or start after end)."""

    kind = "InvalidRange"


class MalformedInput(PlannerError):
    """A batch element could not be deserialized."""

    kind = "MalformedInput"


class InvalidEvent(PlannerError):
    """Semantic validation failure for an event or patch."""

    kind = "InvalidEvent"

    def __init__(self, message: str, index: Optional[int] = None):
        if index is not None:
            message = f"events[{index}]: {message}"
        super().__init__(message)
        self.index = index


class NotFound(PlannerError):
    """Target event is absent or owned by someone else."""

    kind = "NotFound"


class StoreUnavailable(PlannerError):
    """The persistence collaborator failed."""

    kind = "StoreUnavailable"


class PolicyViolation(PlannerError):
    """Batch overlaps an enabled time block while enforcement is on."""

    kind = "PolicyViolation"
