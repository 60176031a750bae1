"""Exceptions raised while building and solving circuits."""


class CircuitValidationError(ValueError):
    """Raised when a circuit or one of its elements is invalid."""


class AuxiliaryIndexError(CircuitValidationError):
    """Raised when auxiliary (branch-current) indices are duplicated, gapped or out of range."""


class RunnerError(RuntimeError):
    """Base class for solver failures."""


class DegenerateCircuitError(RunnerError):
    """Raised when the circuit has no non-ground node to solve for."""


class SingularSystemError(RunnerError):
    """Raised when the circuit matrix is singular or too ill-conditioned to trust."""
