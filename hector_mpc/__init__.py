"""Convex MPC building blocks for bipedal locomotion: rotations, curves, gaits, constraints and the QP solver."""

__version__ = "0.1.0"