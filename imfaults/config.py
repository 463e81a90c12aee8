"""
config.py — Build Settings and Fault Class Table

Default time/window settings, base constants and per-class run counts for
the dataset builder, plus JSON config loading for the command line.
"""

import json


# ── Fault Classes ──────────────────────────────────────────────────────────────

FAULT_CLASSES = {
    0: 'healthy',
    1: 'voltage_unbalance',
    2: 'torque_overload',
    3: 'torque_braking',
}


# ── Signal Channels ────────────────────────────────────────────────────────────

# Channel key used in the pipeline -> trace name returned by a simulator
TRACE_NAMES = {
    'ia'    : 'phase_current_a',
    'ib'    : 'phase_current_b',
    'ic'    : 'phase_current_c',
    'speed' : 'rotor_speed_pu',
    'torque': 'electrical_torque_pu',
    'slip'  : 'slip_pu',
}

CHANNELS = tuple(TRACE_NAMES)


# ── Default Settings ───────────────────────────────────────────────────────────

DEFAULT_SETTINGS = {
    'stop_time'         : 10.0,   # simulation stop time [s]
    't_ignore'          : 1.0,    # discard startup before this time [s]
    't_end_use'         : 9.0,    # discard samples after this time [s]
    'win_sec'           : 0.2,    # feature window length [s]
    'step_sec'          : 0.1,    # hop between windows [s]
    'base_voltage'      : 220.0,  # line-to-neutral voltage [V]
    'base_torque'       : 30.0,   # nominal mechanical torque [Nm]
    'min_run_samples'   : 10,     # trimmed run must keep this many samples
    'min_window_samples': 5,      # sparser windows are dropped
    'unbalance_eps'     : 1e-6,   # mean RMS below this gives unbalance 0
}

DEFAULT_RUN_COUNTS = {0: 200, 1: 100, 2: 100, 3: 100}

DEFAULT_SEED = 0


def validate_settings(settings):
    """
    Check a settings dict for unknown keys and inconsistent values.

    Parameters
    ----------
    settings : dict — build settings (see DEFAULT_SETTINGS)

    Returns
    -------
    settings : dict — the same dict, for chaining

    Raises
    ------
    ValueError on unknown keys, non-positive durations or an empty
    usable interval.
    """
    unknown = sorted(set(settings) - set(DEFAULT_SETTINGS))
    if unknown:
        raise ValueError(f"Unknown settings: {unknown}")

    for key in ('stop_time', 'win_sec', 'step_sec'):
        if settings[key] <= 0:
            raise ValueError(f"'{key}' must be positive, got {settings[key]}")

    if settings['t_end_use'] <= settings['t_ignore']:
        raise ValueError(
            f"'t_end_use' ({settings['t_end_use']}) must be greater than "
            f"'t_ignore' ({settings['t_ignore']})")

    if settings['min_run_samples'] < 1 or settings['min_window_samples'] < 1:
        raise ValueError("Minimum sample counts must be at least 1")

    return settings


def merge_settings(overrides=None):
    """Return DEFAULT_SETTINGS updated with `overrides`, validated."""
    settings = dict(DEFAULT_SETTINGS)
    settings.update(overrides or {})
    return validate_settings(settings)


def load_config(path):
    """
    Load a JSON build config.

    Recognised top-level keys are 'settings' (partial DEFAULT_SETTINGS),
    'run_counts' (class id -> number of runs) and 'seed'.

    Parameters
    ----------
    path : str — JSON file path

    Returns
    -------
    dict with keys 'settings', 'run_counts', 'seed'
    """
    with open(path) as fh:
        raw = json.load(fh)

    unknown = sorted(set(raw) - {'settings', 'run_counts', 'seed'})
    if unknown:
        raise ValueError(f"Unknown config sections in {path}: {unknown}")

    # JSON object keys are always strings
    run_counts = {int(k): int(v) for k, v in raw.get('run_counts', DEFAULT_RUN_COUNTS).items()}

    return {
        'settings'  : merge_settings(raw.get('settings')),
        'run_counts': run_counts,
        'seed'      : int(raw.get('seed', DEFAULT_SEED)),
    }
