import numpy as np
import pytest


def make_constant_simulator(fs=1000.0, f_supply=50.0, speed=0.98, torque=1.0, slip=0.02):
    """Simulator stub returning unit sine currents and constant mechanical channels."""
    calls = []

    def simulator(params, stop_time):
        calls.append((dict(params), stop_time))
        t    = np.linspace(0.0, stop_time, int(round(stop_time * fs)) + 1)
        sine = np.sin(2 * np.pi * f_supply * t)
        return {
            'phase_current_a'     : (t, sine),
            'phase_current_b'     : (t, sine.copy()),
            'phase_current_c'     : (t, sine.copy()),
            'rotor_speed_pu'      : (t, np.full_like(t, speed)),
            'electrical_torque_pu': (t, np.full_like(t, torque)),
            'slip_pu'             : (t, np.full_like(t, slip)),
        }

    simulator.calls = calls
    return simulator


def make_param_echo_simulator(fs=200.0):
    """Simulator stub whose outputs depend on the drawn parameters."""
    def simulator(params, stop_time):
        t = np.linspace(0.0, stop_time, int(round(stop_time * fs)) + 1)
        w = 2 * np.pi * 50.0 * t
        return {
            'phase_current_a'     : (t, (1 + params['delta_a']) * np.sin(w)),
            'phase_current_b'     : (t, (1 + params['delta_b']) * np.sin(w - 2.0944)),
            'phase_current_c'     : (t, (1 + params['delta_c']) * np.sin(w + 2.0944)),
            'rotor_speed_pu'      : (t, 1 - 0.03 * params['torque_factor'] + 0.001 * np.sin(t)),
            'electrical_torque_pu': (t, params['torque_factor'] + 0.01 * np.cos(w)),
            'slip_pu'             : (t, 0.03 * params['torque_factor'] - 0.001 * np.sin(t)),
        }
    return simulator


@pytest.fixture
def constant_simulator():
    return make_constant_simulator()


@pytest.fixture
def echo_simulator():
    return make_param_echo_simulator()


@pytest.fixture
def uniform_trimmed():
    """8 s of trimmed signals at 50 samples/s over [1, 9]."""
    t = np.linspace(1.0, 9.0, 401)
    trimmed = {'time': t}
    for i, name in enumerate(('ia', 'ib', 'ic', 'speed', 'torque', 'slip')):
        trimmed[name] = np.sin(t + i)
    return trimmed
