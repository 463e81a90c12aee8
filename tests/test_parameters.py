import numpy as np
import pytest

from imfaults.parameters import random_params_for_class, InvalidClassError


SEEDS = range(25)


class TestHealthyAndOverload:
    def test_healthy_draws_near_nominal(self):
        draws = np.array([random_params_for_class(0, np.random.default_rng(s)) for s in range(500)])

        assert abs(draws[:, 0].mean() - 1.0) < 0.02, "Torque factor should centre on 1"
        assert 0.03 < draws[:, 0].std() < 0.07, "Torque factor spread should be about 0.05"
        assert np.all(np.abs(draws[:, 1:].mean(axis=0)) < 0.01), "Deltas should centre on 0"

    def test_overload_torque_in_range(self):
        for s in SEEDS:
            t_factor, *_ = random_params_for_class(2, np.random.default_rng(s))
            assert 1.3 <= t_factor <= 2.0

    def test_braking_torque_negative_in_range(self):
        for s in SEEDS:
            t_factor, *_ = random_params_for_class(3, np.random.default_rng(s))
            assert -2.2 <= t_factor <= -1.2


class TestVoltageUnbalance:
    def test_exactly_one_phase_sagged(self):
        for s in SEEDS:
            _, *deltas = random_params_for_class(1, np.random.default_rng(s))
            deltas = np.array(deltas)

            assert np.count_nonzero(deltas == 0.0) == 2, "Two phases should be untouched"
            sag = deltas[deltas != 0.0][0]
            assert -0.35 <= sag <= -0.10

    def test_every_phase_gets_selected(self):
        sagged = set()
        for s in range(100):
            _, *deltas = random_params_for_class(1, np.random.default_rng(s))
            sagged.add(int(np.argmin(deltas)))
        assert sagged == {0, 1, 2}


class TestDeterminism:
    @pytest.mark.parametrize('class_id', [0, 1, 2, 3])
    def test_same_seed_same_draw(self, class_id):
        a = random_params_for_class(class_id, np.random.default_rng(7))
        b = random_params_for_class(class_id, np.random.default_rng(7))
        assert a == b

    def test_returns_plain_floats(self):
        params = random_params_for_class(1, np.random.default_rng(0))
        assert len(params) == 4
        assert all(isinstance(p, float) for p in params)


class TestInvalidClass:
    @pytest.mark.parametrize('class_id', [-1, 4, 10, 'healthy', None])
    def test_unknown_class_raises(self, class_id):
        with pytest.raises(InvalidClassError):
            random_params_for_class(class_id, np.random.default_rng(0))

    def test_is_value_error(self):
        assert issubclass(InvalidClassError, ValueError)
