"""Custom exception classes for phaselayer."""

from typing import Any


class PhaseLayerError(Exception):
    """Base class for all custom exceptions in phaselayer."""

    pass


class ConfigurationError(PhaseLayerError):
    """Raised when loading or validating the configuration file fails."""

    pass


class RegistrationError(PhaseLayerError):
    """
    Raised when a pipeline is misconfigured at registration time.

    Registration errors are programmer errors: they surface while the
    layer is being assembled and are never recovered at request time.
    """

    pass


class UnsupportedHandlerError(RegistrationError):
    """Raised when a registered value matches none of the handler shapes."""

    def __init__(self, value: Any, phase: str = ""):
        self.value = value
        self.phase = phase

        full_msg = f"phaselayer: unsupported middleware interface: {type(value).__name__}"
        if phase:
            full_msg += f" (phase: {phase})"
        super().__init__(full_msg)


class InvalidPriorityError(RegistrationError):
    """Raised when a priority outside the documented levels is used."""

    def __init__(self, priority: Any):
        self.priority = priority
        super().__init__(
            f"phaselayer: invalid priority {priority!r}. "
            "Use one of Priority.HEAD, Priority.NORMAL or Priority.TAIL."
        )
