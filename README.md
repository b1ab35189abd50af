# hector_mpc

Building blocks for force-and-moment based convex model predictive control
(MPC) of a bipedal robot with line-contact feet.

## Modules

- `hector_mpc.orientation` – coordinate rotations (`coordinate_rotation`,
  `CoordinateAxis`), conversions between rotation matrices, quaternions
  (`[w, x, y, z]`) and roll/pitch/yaw, skew matrices, axis-angle conversions,
  quaternion products, derivatives and integration (`integrate_quat`,
  `integrate_quat_implicit`), plus `square` and `almost_equal`.
- `hector_mpc.interpolation` – `lerp`, `cubic_bezier` and its derivatives,
  and `FirstOrderIIRFilter`, a first-order low-pass filter built from a gain
  or from cutoff and sample frequencies (`FirstOrderIIRFilter.from_frequencies`).
- `hector_mpc.bspline` – `BSpline`, a clamped uniform B-spline with pinned
  initial and final derivatives and free middle control points.
- `hector_mpc.bezier` – `BezierCurve`, a timed Bezier curve of any order and
  dimension with `point` and `velocity`.
- `hector_mpc.linalg` – `pseudo_inverse`, which drops singular values not
  above a threshold.
- `hector_mpc.timer` – `Timer`, a monotonic stopwatch.
- `hector_mpc.gait` – `Gait`, a periodic two-leg contact schedule giving
  contact and swing subphases and the per-step contact table (`mpc_table`).
- `hector_mpc.robot_state` – `RobotState`, the rigid-body state used by the
  solver.
- `hector_mpc.constraints` – `foot_rotation_matrices` from ten joint angles,
  and `Constraints`, which builds the friction-cone, line-contact moment and
  vertical force constraint matrix with its bounds.
- `hector_mpc.solver` – the condensed QP: `ct_ss_mats` (continuous
  dynamics), `c2qp` (prediction matrices, horizon at most 19),
  `correct_joint_angles`, `euler_to_rotation` and `solve_mpc`. Legs that are
  out of contact have their variables and constraints removed before the QP
  is solved.
- `hector_mpc.interface` – `MPCInterface`, a stateful front end that stores
  the problem setup and the latest data and returns the solved ground
  reaction forces and moments.
- `hector_mpc.biped` – `Biped`, the robot's link lengths, hip offsets and
  mass, with `hip_location` and `hip2_location`.

## Installation

```
pip install .
```

## Example

```python
from hector_mpc.gait import Gait
from hector_mpc.interface import MPCInterface

standing = Gait(10, (0, 0), (10, 10), "Standing")
standing.set_iterations(5, 0)
table = standing.mpc_table()

mpc = MPCInterface()
mpc.setup_problem(dt=0.03, horizon=10, mu=0.25, f_max=500)
solution = mpc.update_problem_data(
    p=[0, 0, 0.55], v=[0, 0, 0], q=[1, 0, 0, 0], w=[0, 0, 0],
    r=[0.0, 0.0, 0.047, -0.047, -0.55, -0.55],
    joint_angles=[0.0] * 10, yaw=0.0,
    weights=[100, 100, 150, 200, 200, 300, 1, 1, 1, 1, 1, 1],
    state_trajectory=[0.0, 0.0, 0.0, 0.0, 0.0, 0.55, 0, 0, 0, 0, 0, 0] * 10,
    alpha_k=[1e-4, 1e-4, 5e-4, 1e-4, 1e-4, 5e-4] + [1e-2] * 6,
    gait=table,
)
left_force = [mpc.get_solution(i) for i in range(3)]
```

`r` holds the foot positions relative to the body row by row, as a 3x2
matrix with one column per foot. The solution holds twelve values per
horizon step: the forces of both legs (indices 0–5) followed by their
moments (indices 6–11). `get_solution` returns 0.0 until a problem has been
solved. The friction coefficient passed to `setup_problem` is stored with
the setup; the solver's constraint matrix uses its own fixed coefficient.

## What this package does not do

It solves one MPC problem at a time from the data it is given. It does not
estimate the robot's state, plan foot placements or swing trajectories, run
a locomotion control loop or state machine, or talk to a simulator or to
the robot.

## Tests

```
pip install .[test]
pytest
```