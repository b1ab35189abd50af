import math

import numpy as np
import pytest

from hector_mpc.orientation import CoordinateAxis, coordinate_rotation, vector_to_skew_mat
from hector_mpc.solver import (
    ProblemSetup,
    UpdateData,
    c2qp,
    correct_joint_angles,
    cross_mat,
    ct_ss_mats,
    euler_to_rotation,
    near_one,
    near_zero,
    quat_to_rpy,
    solve_mpc,
)

PI = 3.14159265359
WEIGHTS = [100, 100, 150, 200, 200, 300, 1, 1, 1, 1, 1, 1]
ALPHA = [1e-4, 1e-4, 5e-4, 1e-4, 1e-4, 5e-4, 1e-2, 1e-2, 1e-2, 1e-2, 1e-2, 1e-2]
HORIZON = 3
SETUP = ProblemSetup(dt=0.03, mu=0.25, f_max=500.0, horizon=HORIZON)


def _update(gait, z_des=0.55):
    state = [0, 0, 0, 0, 0, z_des, 0, 0, 0, 0, 0, 0]
    return UpdateData(
        p=[0.0, 0.0, 0.55],
        v=[0.0, 0.0, 0.0],
        q=[1.0, 0.0, 0.0, 0.0],
        w=[0.0, 0.0, 0.0],
        r=[0.0, 0.0, 0.1, -0.1, -0.55, -0.55],
        joint_angles=[0.0] * 10,
        yaw=0.0,
        weights=WEIGHTS,
        traj=state * HORIZON,
        alpha_k=ALPHA,
        gait=gait,
    )


def test_euler_to_rotation_identity_at_zero():
    assert np.allclose(euler_to_rotation(0.0, 0.0, 0.0), np.eye(3))


def test_euler_to_rotation_pure_yaw_is_transposed_rotation():
    result = euler_to_rotation(0.3, 0.0, 0.7)
    assert np.allclose(result, coordinate_rotation(CoordinateAxis.Z, 0.7))


def test_euler_to_rotation_ignores_roll():
    assert np.allclose(euler_to_rotation(0.5, 0.2, 0.1), euler_to_rotation(-1.0, 0.2, 0.1))


def test_near_zero_and_near_one():
    assert near_zero(0.00005)
    assert near_zero(-0.00005)
    assert not near_zero(0.001)
    assert near_one(2.0)
    assert near_one(2.00001)
    assert not near_one(1.0)


def test_near_zero_elementwise():
    result = near_zero(np.array([0.0, 0.5, -0.00001]))
    assert result.tolist() == [True, False, True]


def test_cross_mat_matches_cross_product():
    r = np.array([0.1, -0.2, 0.3])
    u = np.array([1.0, 2.0, -0.5])
    assert np.allclose(cross_mat(np.eye(3), r) @ u, np.cross(r, u))
    assert np.allclose(cross_mat(2 * np.eye(3), r), 2 * vector_to_skew_mat(r))


def test_ct_ss_mats_structure():
    inertia = np.diag([0.5, 0.6, 0.1])
    r_feet = np.array([[0.0, 0.0], [0.1, -0.1], [-0.5, -0.5]])
    r_yaw = coordinate_rotation(CoordinateAxis.Z, 0.4)
    a, b = ct_ss_mats(inertia, 10.0, r_feet, r_yaw)
    assert a.shape == (13, 13)
    assert b.shape == (13, 12)
    assert np.allclose(a[0:3, 6:9], r_yaw)
    assert np.allclose(a[3:6, 9:12], np.eye(3))
    assert a[11, 12] == -1.0
    assert np.allclose(b[9:12, 0:3], np.eye(3) / 10.0)
    assert np.allclose(b[9:12, 3:6], np.eye(3) / 10.0)
    i_inv = np.linalg.inv(inertia)
    assert np.allclose(b[6:9, 6:9], i_inv)
    assert np.allclose(b[6:9, 9:12], i_inv)
    u = np.array([1.0, -2.0, 3.0])
    assert np.allclose(b[6:9, 0:3] @ u, i_inv @ np.cross(r_feet[:, 0], u))
    assert np.allclose(b[6:9, 3:6] @ u, i_inv @ np.cross(r_feet[:, 1], u))


def test_ct_ss_mats_rejects_bad_shape():
    with pytest.raises(ValueError):
        ct_ss_mats(np.eye(3), 10.0, np.zeros((2, 2)), np.eye(3))


def test_c2qp_matches_step_by_step_simulation():
    rng = np.random.default_rng(0)
    ac = rng.normal(size=(13, 13)) * 0.1
    bc = rng.normal(size=(13, 12)) * 0.1
    dt = 0.05
    horizon = 4
    a_qp, b_qp = c2qp(ac, bc, dt, horizon)
    assert a_qp.shape == (13 * horizon, 13)
    assert b_qp.shape == (13 * horizon, 12 * horizon)

    x0 = rng.normal(size=13)
    u = rng.normal(size=(horizon, 12))
    x = x0
    states = []
    for k in range(horizon):
        x = x + dt * (ac @ x + bc @ u[k])
        states.append(x)
    assert np.allclose(a_qp @ x0 + b_qp @ u.reshape(-1), np.concatenate(states))


def test_c2qp_is_causal():
    rng = np.random.default_rng(1)
    bc = rng.normal(size=(13, 12))
    _, b_qp = c2qp(rng.normal(size=(13, 13)), bc, 0.1, 3)
    assert np.count_nonzero(b_qp[0:13, 12:36]) == 0
    assert np.count_nonzero(b_qp[13:26, 24:36]) == 0
    assert np.allclose(b_qp[0:13, 0:12], 0.1 * bc)


def test_c2qp_rejects_long_horizon():
    with pytest.raises(ValueError):
        c2qp(np.zeros((13, 13)), np.zeros((13, 12)), 0.01, 20)


@pytest.mark.parametrize(
    "quat, index",
    [
        ([math.cos(0.2), math.sin(0.2), 0.0, 0.0], 0),
        ([math.cos(0.2), 0.0, math.sin(0.2), 0.0], 1),
        ([math.cos(0.2), 0.0, 0.0, math.sin(0.2)], 2),
    ],
)
def test_quat_to_rpy_single_axis(quat, index):
    rpy = quat_to_rpy(quat)
    expected = np.zeros(3)
    expected[index] = 0.4
    assert np.allclose(rpy, expected)


def test_correct_joint_angles_offsets():
    result = correct_joint_angles([0.0] * 10)
    offsets = [0.0, 0.0, 0.3 * PI, -0.6 * PI, 0.3 * PI]
    assert np.allclose(result, offsets + offsets)


def test_correct_joint_angles_wraps():
    angles = [7.0] + [0.0] * 9
    assert correct_joint_angles(angles)[0] == pytest.approx(7.0 - 2 * PI)


def test_correct_joint_angles_rejects_wrong_length():
    with pytest.raises(ValueError):
        correct_joint_angles([0.0] * 9)


def test_solve_mpc_respects_force_constraints():
    solution = solve_mpc(_update([1, 1] * HORIZON), SETUP)
    assert solution.shape == (12 * HORIZON,)
    for step in solution.reshape(HORIZON, 12):
        for leg in range(2):
            fx, fy, fz = step[3 * leg:3 * leg + 3]
            assert fz >= -1e-6
            assert 2 * fz <= SETUP.f_max + 1e-6
            assert abs(fx) <= fz / 2 + 1e-6
            assert abs(fy) <= fz / 2 + 1e-6
    assert solution[2] + solution[5] > 0.0


def test_solve_mpc_swing_leg_is_zeroed():
    solution = solve_mpc(_update([1, 0] * HORIZON), SETUP).reshape(HORIZON, 12)
    assert np.count_nonzero(solution[:, 3:6]) == 0
    assert np.count_nonzero(solution[:, 9:12]) == 0
    assert float(solution[:, 2].min()) > 0.0


def test_solve_mpc_no_contact_gives_zero():
    solution = solve_mpc(_update([0, 0] * HORIZON), SETUP)
    assert solution.shape == (12 * HORIZON,)
    assert np.count_nonzero(solution) == 0


def test_solve_mpc_higher_target_pushes_harder():
    low = solve_mpc(_update([1, 1] * HORIZON, z_des=0.55), SETUP)
    high = solve_mpc(_update([1, 1] * HORIZON, z_des=0.65), SETUP)
    assert high[2] + high[5] > low[2] + low[5]


def test_solve_mpc_rejects_short_trajectory():
    update = _update([1, 1] * HORIZON)
    update.traj = [0.0] * 12
    with pytest.raises(ValueError):
        solve_mpc(update, SETUP)


def test_solve_mpc_rejects_empty_horizon():
    with pytest.raises(ValueError):
        solve_mpc(_update([1, 1] * HORIZON), ProblemSetup(dt=0.03, mu=0.25, f_max=500.0, horizon=0))