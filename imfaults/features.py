"""
features.py — Window Feature Extraction

Reduces one window of the six motor channels to a 10-element feature
vector:

    Electrical : phase RMS (a, b, c), current unbalance index
    Mechanical : mean / std of rotor speed, electromagnetic torque, slip

Standard deviations are population (ddof=0). Features depend only on
sample values, never on timestamps.
"""

import numpy as np

from .config import DEFAULT_SETTINGS


FEATURE_NAMES = [
    'ia_rms',
    'ib_rms',
    'ic_rms',
    'current_unbalance',
    'speed_mean',
    'speed_std',
    'torque_mean',
    'torque_std',
    'slip_mean',
    'slip_std',
]

N_FEATURES = len(FEATURE_NAMES)


def rms(x):
    """Root-mean-square of a 1D signal."""
    x = np.asarray(x, dtype=float)
    return float(np.sqrt(np.mean(x ** 2)))


def unbalance_index(rms_a, rms_b, rms_c, eps=DEFAULT_SETTINGS['unbalance_eps']):
    """
    Current unbalance index (max - min) / mean of the three phase RMS values.

    Defined as 0 when the mean RMS is below eps, so near-zero currents
    do not blow up the ratio.
    """
    phases = np.array([rms_a, rms_b, rms_c], dtype=float)
    i_avg  = phases.mean()
    if i_avg < eps:
        return 0.0
    return float((phases.max() - phases.min()) / i_avg)


def extract_features(ia, ib, ic, speed, torque, slip, eps=DEFAULT_SETTINGS['unbalance_eps']):
    """
    Feature vector for one time window.

    Parameters
    ----------
    ia, ib, ic : array — phase currents
    speed      : array — rotor speed [pu]
    torque     : array — electromagnetic torque [pu]
    slip       : array — slip [pu]
    eps        : float — mean-RMS floor for the unbalance index

    Returns
    -------
    f : array (10,) — features in FEATURE_NAMES order
    """
    signals = [np.asarray(s, dtype=float) for s in (ia, ib, ic, speed, torque, slip)]

    n = len(signals[0])
    if n == 0:
        raise ValueError("Cannot extract features from an empty window")
    if any(len(s) != n for s in signals):
        raise ValueError("All channels of a window must have the same length")

    ia, ib, ic, speed, torque, slip = signals

    ia_rms = rms(ia)
    ib_rms = rms(ib)
    ic_rms = rms(ic)

    return np.array([
        ia_rms,
        ib_rms,
        ic_rms,
        unbalance_index(ia_rms, ib_rms, ic_rms, eps=eps),
        speed.mean(),
        speed.std(),
        torque.mean(),
        torque.std(),
        slip.mean(),
        slip.std(),
    ])


def extract_window_features(segment, eps=DEFAULT_SETTINGS['unbalance_eps']):
    """Feature vector for a window segment dict as yielded by segment_windows."""
    return extract_features(segment['ia'], segment['ib'], segment['ic'],
                            segment['speed'], segment['torque'], segment['slip'],
                            eps=eps)
