"""Periodic contact schedules for a two-legged robot."""

from __future__ import annotations

import numpy as np

NUM_LEGS = 2


def _pair(values, what: str) -> np.ndarray:
    arr = np.asarray(values, dtype=int).reshape(-1)
    if arr.shape != (NUM_LEGS,):
        raise ValueError(f"{what} must hold {NUM_LEGS} values, got shape {np.shape(values)}")
    return arr


class Gait:
    """A gait cycle split into ``n_segments`` MPC segments.

    Each leg is in stance for ``durations[leg]`` segments starting at segment
    ``offsets[leg]`` of the cycle and in swing for the rest.
    """

    def __init__(self, n_segments: int, offsets, durations, name: str = ""):
        if n_segments <= 0:
            raise ValueError(f"number of segments must be positive, got {n_segments}")
        self.name = name
        self.n_segments = int(n_segments)
        self.offsets = _pair(offsets, "offsets")
        self.durations = _pair(durations, "durations")
        self.offsets_phase = self.offsets.astype(float) / self.n_segments
        self.durations_phase = self.durations.astype(float) / self.n_segments
        self.stance = int(self.durations[0])
        self.swing = self.n_segments - int(self.durations[0])
        self.iteration = 0
        self.phase = 0.0

    def __repr__(self) -> str:
        return (
            f"Gait(name={self.name!r}, n_segments={self.n_segments}, "
            f"offsets={self.offsets.tolist()}, durations={self.durations.tolist()})"
        )

    @staticmethod
    def _subphase(progress: np.ndarray, length: np.ndarray) -> np.ndarray:
        progress = np.where(progress < 0, progress + 1.0, progress)
        with np.errstate(divide="ignore", invalid="ignore"):
            return np.where(progress > length, 0.0, progress / length)

    def contact_subphase(self) -> np.ndarray:
        """Progress through stance for each leg, 0 when the leg is not in stance."""
        return self._subphase(self.phase - self.offsets_phase, self.durations_phase)

    def swing_subphase(self) -> np.ndarray:
        """Progress through swing for each leg, 0 when the leg is not swinging."""
        swing_offset = self.offsets_phase + self.durations_phase
        swing_offset = np.where(swing_offset > 1, swing_offset - 1.0, swing_offset)
        swing_duration = 1.0 - self.durations_phase
        return self._subphase(self.phase - swing_offset, swing_duration)

    def mpc_table(self) -> list[int]:
        """Contact flags over the horizon, flattened as ``[segment * 2 + leg]``."""
        table: list[int] = []
        for i in range(self.n_segments):
            current = (i + self.iteration) % self.n_segments
            progress = current - self.offsets
            progress = np.where(progress < 0, progress + self.n_segments, progress)
            table.extend(int(flag) for flag in progress < self.durations)
        return table

    def set_iterations(self, iterations_per_mpc: int, current_iteration: int) -> None:
        """Set the gait's segment and phase from the controller's iteration count."""
        if iterations_per_mpc <= 0:
            raise ValueError(f"iterations per MPC step must be positive, got {iterations_per_mpc}")
        cycle = iterations_per_mpc * self.n_segments
        self.iteration = (current_iteration // iterations_per_mpc) % self.n_segments
        self.phase = (current_iteration % cycle) / cycle