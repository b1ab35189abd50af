"""Geometry and mass of the biped."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass
class Biped:
    """Link lengths, hip offsets and mass of the robot."""

    mass: float = 13.856
    leg_offset_x: float = 0.0
    leg_offset_y: float = 0.047
    leg_offset_z: float = -0.136
    leg_offset_x2: float = 0.0
    leg_offset_y2: float = 0.047
    leg_offset_z2: float = -0.136
    hip_link_length: float = 0.038
    thigh_link_length: float = 0.22
    calf_link_length: float = 0.22

    @staticmethod
    def _side(leg: int) -> float:
        if leg == 0:
            return 1.0
        if leg == 1:
            return -1.0
        raise ValueError(f"leg must be 0 or 1, got {leg}")

    def hip_location(self, leg: int) -> np.ndarray:
        """Position of the hip of ``leg`` (0 left, 1 right) in the body frame."""
        side = self._side(leg)
        return np.array([self.leg_offset_x, side * self.leg_offset_y, self.leg_offset_z])

    def hip2_location(self, leg: int) -> np.ndarray:
        """Position of the second hip joint of ``leg`` in the body frame."""
        side = self._side(leg)
        # The x offset of the first hip is used for both legs, as in the robot model.
        return np.array([self.leg_offset_x2, side * self.leg_offset_y2, self.leg_offset_z2])