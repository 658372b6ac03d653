"""Exceptions raised by the displacement controller."""


class DisplacementControlError(Exception):
    """Base class for all displacement controller errors."""


class ConfigurationError(DisplacementControlError, ValueError):
    """Raised at construction for targets or settings that cannot produce motion.

    Examples: a zero-distance target, non-finite distances, non-positive
    motion constraints or tolerance.
    """


class EpisodeStateError(DisplacementControlError, RuntimeError):
    """Raised when a lifecycle hook is called in the wrong episode state."""


class SensorFault(DisplacementControlError):
    """Raised by a collaborator that cannot produce a valid reading.

    The controller does not validate sensor readings; it lets this propagate
    so the scheduler can tear the episode down.
    """
