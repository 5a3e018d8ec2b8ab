"""Sine-wave beep played while the sound timer runs."""

from __future__ import annotations

import math
from array import array

BEEP_FREQUENCY = 400
BEEP_AMPLITUDE = 28000
SAMPLE_RATE = 44100

_TAU = 2.0 * math.pi


class BeepGenerator:
    """Produces signed 16-bit mono samples of a continuous sine tone."""

    def __init__(
        self,
        frequency: float = BEEP_FREQUENCY,
        amplitude: int = BEEP_AMPLITUDE,
        sample_rate: int = SAMPLE_RATE,
    ) -> None:
        self.frequency = frequency
        self.amplitude = amplitude
        self.sample_rate = sample_rate
        self.increment = _TAU * frequency / sample_rate
        self.phase = 0.0

    def fill(self, count: int, active: bool) -> list[int]:
        """Return ``count`` samples; silence resets the phase of the tone."""
        if not active:
            if count > 0:
                self.phase = 0.0
            return [0] * max(count, 0)

        samples = []
        for _ in range(count):
            samples.append(int(self.amplitude * math.sin(self.phase)))
            self.phase += self.increment
            if self.phase >= _TAU:
                self.phase -= _TAU
        return samples

    def fill_bytes(self, count: int, active: bool) -> bytes:
        """Return a native-endian int16 buffer for a request of ``count`` bytes."""
        return array("h", self.fill(count >> 1, active)).tobytes()