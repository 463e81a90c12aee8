"""
motor.py — Reference Induction Motor Simulator

A quasi-steady-state per-unit model of a three-phase squirrel cage
induction motor, used as the default simulator for the dataset builder.
Any callable with the same signature can replace it.

Model
-----
    Electrical : per-phase equivalent circuit (r_s, x_ls, x_m, r_r, x_lr)
                 solved separately for the positive and negative sequence
                 of the (possibly unbalanced) supply
    Torque     : air-gap torque of both sequences, plus a double supply
                 frequency ripple proportional to V1 * V2
    Mechanical : one-mass swing equation 2H dw/dt = Te - T_load,
                 integrated with scipy's solve_ivp
    Load       : T_load = torque_factor (pu), stepped on at t_load_on
                 after a no-load start

Stator and rotor flux transients are neglected; currents follow the
sequence phasors at the instantaneous slip.
"""

import numpy as np
from scipy.integrate import solve_ivp


# ── Default Motor Parameters (4-pole, 50 Hz, per-unit) ────────────────────────

DEFAULT_MOTOR = {
    'f_e'      : 50.0,    # Supply frequency [Hz]
    'poles'    : 4,       # Number of poles
    'r_s'      : 0.03,    # Stator resistance [pu]
    'x_ls'     : 0.08,    # Stator leakage reactance [pu]
    'x_m'      : 3.0,     # Magnetising reactance [pu]
    'r_r'      : 0.03,    # Rotor resistance, referred [pu]
    'x_lr'     : 0.08,    # Rotor leakage reactance, referred [pu]
    'h'        : 0.15,    # Inertia constant [s]
    't_load_on': 0.5,     # Load torque step time [s]
    'fs'       : 1000.0,  # Output sampling rate [Hz]
}

A_OP = np.exp(2j * np.pi / 3)


# ── Sequence Components ────────────────────────────────────────────────────────

def sequence_voltages(delta_a, delta_b, delta_c):
    """
    Positive and negative sequence phasors of the supply voltage [pu].

    Phase magnitudes are 1 + delta; angles stay at 0, -120, +120 degrees.
    """
    v_a = 1.0 + delta_a
    v_b = (1.0 + delta_b) * A_OP ** 2
    v_c = (1.0 + delta_c) * A_OP
    v_1 = (v_a + A_OP * v_b + A_OP ** 2 * v_c) / 3
    v_2 = (v_a + A_OP ** 2 * v_b + A_OP * v_c) / 3
    return v_1, v_2


def stator_current(v, s, motor):
    """Stator current phasor for voltage v at slip s (array-safe, s=0 allowed)."""
    z_s   = motor['r_s'] + 1j * motor['x_ls']
    y_m   = 1 / (1j * motor['x_m'])
    # Rotor branch admittance written as s / (r_r + j s x_lr) to stay finite at s = 0
    y_r   = s / (motor['r_r'] + 1j * s * motor['x_lr'])
    z_in  = z_s + 1 / (y_m + y_r)
    return v / z_in


def airgap_torque(v, s, motor):
    """Air-gap torque [pu] produced by one sequence at slip s."""
    i_s   = stator_current(v, s, motor)
    e     = v - i_s * (motor['r_s'] + 1j * motor['x_ls'])
    r_r   = motor['r_r']
    x_lr  = motor['x_lr']
    return np.abs(e) ** 2 * s * r_r / (r_r ** 2 + (s * x_lr) ** 2)


def mean_torque(v_1, v_2, s, motor):
    """Positive sequence motoring torque minus the negative sequence braking torque."""
    return airgap_torque(v_1, s, motor) - airgap_torque(v_2, 2 - s, motor)


# ── Simulation ─────────────────────────────────────────────────────────────────

def simulate_induction_motor(params, stop_time, motor=None):
    """
    Run one start-up and loaded operation of the motor.

    Parameters
    ----------
    params    : dict  — 'torque_factor', 'delta_a', 'delta_b', 'delta_c',
                        'base_voltage' [V], 'base_torque' [Nm]
    stop_time : float — simulated duration [s]
    motor     : dict  — motor parameters (uses DEFAULT_MOTOR if None)

    Returns
    -------
    dict of trace name -> (time, values):
        'phase_current_a/b/c'  : phase currents [A]
        'rotor_speed_pu'       : mechanical speed / synchronous speed
        'electrical_torque_pu' : electromagnetic torque / base torque
        'slip_pu'              : slip
    """
    m = motor or DEFAULT_MOTOR

    v_1, v_2  = sequence_voltages(params['delta_a'], params['delta_b'], params['delta_c'])
    t_load    = params['torque_factor']
    two_h     = 2 * m['h']

    def swing(t, w):
        load = t_load if t >= m['t_load_on'] else 0.0
        return [(mean_torque(v_1, v_2, 1 - w[0], m) - load) / two_h]

    n_samples = int(round(stop_time * m['fs'])) + 1
    time      = np.linspace(0.0, stop_time, n_samples)

    sol = solve_ivp(swing, (0.0, stop_time), [0.0], t_eval=time,
                    max_step=5.0 / m['fs'], rtol=1e-6, atol=1e-8)
    if not sol.success:
        raise RuntimeError(f"Motor integration failed: {sol.message}")

    speed = sol.y[0]
    slip  = 1 - speed

    # Double-frequency ripple from the interaction of the two sequences
    omega_e = 2 * np.pi * m['f_e']
    ripple  = 2 * np.abs(v_1) * np.abs(v_2) * np.cos(2 * omega_e * time + np.angle(v_1 * v_2))
    torque  = mean_torque(v_1, v_2, slip, m) + ripple

    # Phase currents from the sequence phasors, scaled to amperes
    omega_sync = omega_e / (m['poles'] / 2)
    i_base     = params['base_torque'] * omega_sync / (3 * params['base_voltage'])
    i_1        = stator_current(v_1, slip, m)
    i_2        = stator_current(v_2, 2 - slip, m)
    carrier    = np.sqrt(2) * i_base * np.exp(1j * omega_e * time)

    # Phase k (a, b, c) = a^-k * I1 + a^k * I2, no zero sequence
    def phase(k):
        return np.real((A_OP ** (-k) * i_1 + A_OP ** k * i_2) * carrier)

    return {
        'phase_current_a'     : (time, phase(0)),
        'phase_current_b'     : (time, phase(1)),
        'phase_current_c'     : (time, phase(2)),
        'rotor_speed_pu'      : (time, speed),
        'electrical_torque_pu': (time, torque),
        'slip_pu'             : (time, slip),
    }
