import numpy as np
import pytest

from hector_mpc.gait import Gait


def walking():
    return Gait(10, (0, 5), (5, 5), "Walking")


def standing():
    return Gait(10, (0, 0), (10, 10), "Standing")


def test_stance_and_swing_lengths():
    g = walking()
    assert g.stance == 5
    assert g.swing == 5
    s = standing()
    assert s.stance == 10
    assert s.swing == 0


def test_standing_table_is_all_contact():
    s = standing()
    s.set_iterations(5, 17)
    assert s.mpc_table() == [1] * 20


def test_walking_table_legs_alternate():
    g = walking()
    g.set_iterations(5, 0)
    table = np.array(g.mpc_table()).reshape(10, 2)
    assert table[:, 0].sum() == 5
    assert table[:, 1].sum() == 5
    assert (table[:, 0] + table[:, 1]).tolist() == [1] * 10
    assert table[0, 0] == 1


def test_walking_table_rotates_with_iteration():
    g = walking()
    g.set_iterations(5, 0)
    base = np.array(g.mpc_table()).reshape(10, 2)
    for shift in range(10):
        g.set_iterations(5, 5 * shift)
        table = np.array(g.mpc_table()).reshape(10, 2)
        assert table.tolist() == np.roll(base, -shift, axis=0).tolist()


def test_phase_is_periodic_and_bounded():
    g = walking()
    for k in range(0, 120, 7):
        g.set_iterations(5, k)
        phase, iteration = g.phase, g.iteration
        assert 0.0 <= phase < 1.0
        assert 0 <= iteration < 10
        g.set_iterations(5, k + 50)
        assert g.phase == pytest.approx(phase)
        assert g.iteration == iteration


def test_contact_and_swing_are_exclusive():
    g = walking()
    contacts = []
    swings = []
    for k in range(50):
        g.set_iterations(5, k)
        contacts.append(g.contact_subphase())
        swings.append(g.swing_subphase())
    contacts = np.array(contacts)
    swings = np.array(swings)
    assert contacts.min() >= 0.0
    assert contacts.max() <= 1.0
    assert swings.min() >= 0.0
    assert swings.max() <= 1.0
    assert float(np.minimum(contacts, swings).max()) == 0.0


def test_subphases_mid_stance():
    g = walking()
    g.set_iterations(5, 10)
    contact = g.contact_subphase()
    swing = g.swing_subphase()
    assert contact[0] == pytest.approx(0.4)
    assert contact[1] == pytest.approx(0.0)
    assert swing[0] == pytest.approx(0.0)
    assert swing[1] == pytest.approx(0.4)


def test_contact_subphase_at_start():
    g = walking()
    g.set_iterations(5, 0)
    contact = g.contact_subphase()
    assert contact[0] == 0.0
    assert contact[1] == pytest.approx(1.0)


def test_invalid_arguments():
    with pytest.raises(ValueError):
        Gait(0, (0, 0), (1, 1))
    with pytest.raises(ValueError):
        Gait(10, (0, 0, 0), (5, 5))
    with pytest.raises(ValueError):
        walking().set_iterations(0, 3)