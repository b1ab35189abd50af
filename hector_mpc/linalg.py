"""Linear algebra helpers."""

from __future__ import annotations

import numpy as np


def pseudo_inverse(matrix, sigma_threshold: float) -> np.ndarray:
    """Pseudo-inverse dropping singular values not above ``sigma_threshold``."""
    m = np.asarray(matrix, dtype=float)
    if m.ndim != 2:
        raise ValueError(f"expected a 2-D matrix, got shape {m.shape}")
    if m.shape == (1, 1):
        value = m[0, 0]
        return np.array([[1.0 / value if value > sigma_threshold else 0.0]])
    u, s, vt = np.linalg.svd(m, full_matrices=False)
    inv_s = np.zeros_like(s)
    keep = s > sigma_threshold
    inv_s[keep] = 1.0 / s[keep]
    return vt.T @ np.diag(inv_s) @ u.T