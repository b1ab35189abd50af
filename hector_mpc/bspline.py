"""Clamped uniform B-spline with position, velocity and acceleration end constraints."""

from __future__ import annotations

import numpy as np


def _is_equal(x: float, y: float) -> bool:
    return (x - y) * (x - y) < 1.0e-10


class BSpline:
    """B-spline through fixed end conditions and free middle control points.

    ``const_level_ini`` and ``const_level_fin`` select how many derivatives are
    pinned at each end: 0 for position only, 1 to add velocity, 2 to add
    acceleration, and so on.
    """

    def __init__(self, dim: int, degree: int, num_middle: int, const_level_ini: int, const_level_fin: int):
        if dim < 1:
            raise ValueError(f"dimension must be positive, got {dim}")
        if degree < 0 or num_middle < 0 or const_level_ini < 0 or const_level_fin < 0:
            raise ValueError("degree, middle point count and constraint levels must be non-negative")
        if const_level_ini > degree or const_level_fin > degree:
            raise ValueError("constraint levels cannot exceed the spline degree")
        self.dim = dim
        self.degree = degree
        self.num_middle = num_middle
        self.const_level_ini = const_level_ini
        self.const_level_fin = const_level_fin
        self.num_knots = degree + num_middle + 2 + const_level_ini + const_level_fin + 1
        self.num_cps = num_middle + 2 + const_level_ini + const_level_fin
        if self.num_knots < 2 * (degree + 1):
            raise ValueError(
                f"invalid setup (num_knots, degree): {self.num_knots}, {degree}"
            )
        self._knots = [0.0] * self.num_knots
        self._cpoints = np.zeros((self.num_cps, dim))
        self._ready = False

    def set_param(self, init, fin, middle_points, fin_time: float) -> None:
        """Set end conditions, middle control points and the spline duration.

        ``init`` holds the initial position followed by its derivatives, each
        ``dim`` values long; ``fin`` likewise for the final point.
        """
        init = np.asarray(init, dtype=float).reshape(-1)
        fin = np.asarray(fin, dtype=float).reshape(-1)
        need_ini = self.dim * (self.const_level_ini + 1)
        need_fin = self.dim * (self.const_level_fin + 1)
        if init.size < need_ini:
            raise ValueError(f"initial conditions need {need_ini} values, got {init.size}")
        if fin.size < need_fin:
            raise ValueError(f"final conditions need {need_fin} values, got {fin.size}")
        middle = np.asarray(middle_points, dtype=float).reshape(-1, self.dim) if self.num_middle else None
        if self.num_middle and middle.shape[0] != self.num_middle:
            raise ValueError(f"expected {self.num_middle} middle points, got {middle.shape[0]}")
        if fin_time <= 0:
            raise ValueError(f"final time must be positive, got {fin_time}")

        self._calc_knots(float(fin_time))
        self._calc_constrained_cpoints(init, fin, float(fin_time))
        if middle is not None:
            start = self.const_level_ini + 1
            self._cpoints[start:start + self.num_middle] = middle
        self._ready = True

    def curve_point(self, u: float) -> np.ndarray:
        """Position at time ``u``, clamped to the spline's time range."""
        u = self._clamp(u)
        span = self._require_span(u)
        basis = self._basis_funs(span, u)
        rows = self._cpoints[span - self.degree: span + 1]
        return np.asarray(basis) @ rows

    def curve_derivative(self, u: float, d: int) -> np.ndarray:
        """Derivative of order ``d`` at time ``u``; zero above the spline degree."""
        if d < 0:
            raise ValueError(f"derivative order must be non-negative, got {d}")
        if d > self.degree:
            return np.zeros(self.dim)
        u = self._clamp(u)
        span = self._require_span(u)
        ders = self._basis_funs_ders(span, u, d)
        rows = self._cpoints[span - self.degree: span + 1]
        return np.asarray(ders[d][: self.degree + 1]) @ rows

    def _clamp(self, u: float) -> float:
        return min(max(float(u), self._knots[0]), self._knots[-1])

    def _require_span(self, u: float) -> int:
        span = self._find_span(u)
        if span is None:
            raise RuntimeError("spline parameters are not set")
        return span

    def _calc_knots(self, tf: float) -> None:
        num_mid = self.num_knots - 2 * self.degree - 2
        step = tf / (num_mid + 1)
        knots = [0.0] * (self.degree + 1)
        for _ in range(num_mid):
            knots.append(knots[-1] + step)
        knots.extend([tf] * (self.degree + 1))
        self._knots = knots

    def _left(self, i: int, j: int, u: float) -> float:
        return u - self._knots[i + 1 - j]

    def _right(self, i: int, j: int, u: float) -> float:
        return self._knots[i + j] - u

    def _find_span(self, u: float) -> int | None:
        knots = self._knots
        last = self.num_knots - 1
        if u < knots[0] or knots[last] < u:
            return None
        if _is_equal(u, knots[last]):
            for i in range(self.num_knots - 2, -1, -1):
                if knots[i] < u <= knots[i + 1]:
                    return i
            return None
        low, high = 0, last
        mid = (low + high) >> 1
        while u < knots[mid] or u >= knots[mid + 1]:
            if u < knots[mid]:
                high = mid
            else:
                low = mid
            mid = (low + high) >> 1
        return mid

    def _basis_funs(self, span: int, u: float) -> list[float]:
        n = [0.0] * (self.degree + 1)
        n[0] = 1.0
        temp = 0.0
        for j in range(1, self.degree + 1):
            saved = 0.0
            for r in range(j):
                left = self._left(span, j - r, u)
                right = self._right(span, r + 1, u)
                if right + left != 0:
                    temp = n[r] / (right + left)
                n[r] = saved + right * temp
                saved = left * temp
            n[j] = saved
        return n

    def _basis_funs_ders(self, span: int, u: float, n: int) -> list[list[float]]:
        p = self.degree
        ndu = [[0.0] * (p + 1) for _ in range(p + 1)]
        a = [[0.0] * (p + 1) for _ in range(2)]
        ders = [[0.0] * max(p + 1, n + 2) for _ in range(n + 1)]

        ndu[0][0] = 1.0
        for j in range(1, p + 1):
            saved = 0.0
            for r in range(j):
                left = self._left(span, j - r, u)
                right = self._right(span, r + 1, u)
                ndu[j][r] = right + left
                temp = ndu[r][j - 1] / ndu[j][r]
                ndu[r][j] = saved + right * temp
                saved = left * temp
            ndu[j][j] = saved

        for j in range(p + 1):
            ders[0][j] = ndu[j][p]

        for r in range(p + 1):
            s1, s2 = 0, 1
            a[0][0] = 1.0
            for k in range(1, n + 1):
                d = 0.0
                rk = r - k
                pk = p - k
                if r >= k:
                    a[s2][0] = a[s1][0] / ndu[pk + 1][rk]
                    d = a[s2][0] * ndu[rk][pk]
                j1 = 1 if rk >= -1 else -rk
                j2 = k - 1 if r - 1 <= pk else p - r
                for j in range(j1, j2 + 1):
                    a[s2][j] = (a[s1][j] - a[s1][j - 1]) / ndu[pk + 1][rk + j]
                    d += a[s2][j] * ndu[rk + j][pk]
                if r <= pk:
                    a[s2][k] = -a[s1][k - 1] / ndu[pk + 1][r]
                    d += a[s2][k] * ndu[r][pk]
                ders[k][r] = d
                s1, s2 = s2, s1

        factor = p
        for k in range(1, n + 1):
            for j in range(p + 1):
                ders[k][j] *= factor
            factor *= p - k
        return ders

    def _calc_constrained_cpoints(self, init: np.ndarray, fin: np.ndarray, tf: float) -> None:
        dim = self.dim
        cps = self._cpoints
        last = self.num_cps - 1
        cps[0] = init[:dim]
        cps[last] = fin[:dim]

        if self.const_level_ini:
            d_mat = self._basis_funs_ders(self._require_span(0.0), 0.0, self.const_level_ini)
            for j in range(1, self.const_level_ini + 1):
                value = init[j * dim:(j + 1) * dim].copy()
                for h in range(j, 0, -1):
                    value -= d_mat[j][h - 1] * cps[h - 1]
                cps[j] = value / d_mat[j][j]

        clf = self.const_level_fin
        if clf:
            c_mat = self._basis_funs_ders(self._require_span(tf), tf, clf)
            for idx, j in enumerate(range(self.num_cps - 2, self.num_cps - 2 - clf, -1), start=1):
                value = fin[idx * dim:(idx + 1) * dim].copy()
                for h in range(idx, 0, -1):
                    value -= c_mat[idx][clf + 2 - h] * cps[self.num_cps - h]
                cps[j] = value / c_mat[idx][clf + 1 - idx]