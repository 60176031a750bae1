from __future__ import annotations
import numpy as np
from typing import Tuple

from mnasim.errors import CircuitValidationError


def angular_frequency(frequency: float) -> float:
    """
    Convert a frequency in hertz to angular frequency (rad/s).

    Every element computing jωL or -j/(ωC) goes through this helper so the
    unit convention is applied in a single place.
    """
    if frequency < 0:
        raise CircuitValidationError(f"Frequency must be non-negative, got {frequency}.")
    return 2.0 * np.pi * frequency


def phasor(magnitude: float, phase_deg: float = 0.0) -> complex:
    """
    Convenience helper to create a complex phasor.

    Args:
        magnitude: Amplitude of the sinusoid.
        phase_deg: Phase in degrees (default: 0).

    Returns:
        Complex number representing the phasor.
    """
    return complex(magnitude * np.exp(1j * np.deg2rad(phase_deg)))


def polar(value: complex) -> Tuple[float, float]:
    """
    Convert a complex number into magnitude/phase (degrees).
    """
    return float(np.abs(value)), float(np.rad2deg(np.angle(value)))
