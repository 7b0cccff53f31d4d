# /// script
# requires-python = ">=3.12"
# dependencies = []
# ///
"""Exceptions raised by the play resolution engine.

Every branch of a play is a data outcome; these are reserved for calls the
engine cannot resolve at all.
"""


class EngineError(Exception):
    """Base class for play resolution failures."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class PreconditionError(EngineError):
    """Raised when a play is requested without the state it requires.

    ``requirement`` names what was missing, e.g. ``"runner on third"`` or
    ``"fielder at 3B"``.
    """

    def __init__(self, message: str, requirement: str | None = None):
        self.requirement = requirement
        super().__init__(message)


class UnsupportedInstructionError(EngineError):
    """Raised when an engine is handed an instruction another engine owns."""

    def __init__(self, instruction: str, engine: str):
        self.instruction = instruction
        self.engine = engine
        super().__init__(f"Instruction '{instruction}' is not handled by the {engine} engine")


class InvalidAdvancementError(EngineError):
    """Raised when an advancement list cannot be applied to a runner state."""


class ScriptExhaustedError(EngineError):
    """Raised when a scripted random source runs out of draws."""
