"""Exception types raised by the rendering core."""

from __future__ import annotations


class BirdPeeringError(Exception):
    """Base class for all rendering errors."""


class CompileError(BirdPeeringError):
    """A template failed to parse or calls a function that does not exist."""

    def __init__(self, template: str, message: str) -> None:
        super().__init__(f"compiling {template} template: {message}")
        self.template = template
        self.message = message


class RenderError(BirdPeeringError):
    """A template failed while executing against its context."""

    def __init__(self, template: str, message: str) -> None:
        super().__init__(f"rendering {template} template: {message}")
        self.template = template
        self.message = message


class EngineStateError(BirdPeeringError):
    """The template engine was used out of order (e.g. render before load)."""


class InvariantViolation(BirdPeeringError, KeyError):
    """Raised by strict callers when a precondition checked upstream is broken."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""
