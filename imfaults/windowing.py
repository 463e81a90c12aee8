"""
windowing.py — Signal Trimming and Sliding-Window Segmentation

Post-run processing of simulator traces before feature extraction:

    1. Trim all channels to the usable interval [t_ignore, t_end_use]
       (drops the startup transient and the tail of the run)
    2. Reject runs with too few samples left
    3. Slide a fixed-duration window with a fixed hop over the trimmed
       time axis, skipping windows that hold too few samples

Time bases may be non-uniform, so windows are selected by timestamp,
not by sample index.
"""

import numpy as np

from .config import CHANNELS, DEFAULT_SETTINGS


# ── Trimming ───────────────────────────────────────────────────────────────────

def trim_signals(time, channels, t_ignore, t_end_use,
                 min_samples=DEFAULT_SETTINGS['min_run_samples']):
    """
    Restrict time and all channels to t_ignore <= t <= t_end_use.

    Parameters
    ----------
    time        : array — common time base [s]
    channels    : dict  — channel key -> array, same length as time
    t_ignore    : float — start of usable interval [s]
    t_end_use   : float — end of usable interval [s] (inclusive)
    min_samples : int   — minimum samples the trimmed run must keep

    Returns
    -------
    trimmed : dict with key 'time' plus one array per channel, all of
              identical length; None if fewer than min_samples remain
    """
    time = np.asarray(time, dtype=float)

    for name, values in channels.items():
        if len(values) != len(time):
            raise ValueError(
                f"Channel '{name}' has {len(values)} samples, "
                f"time base has {len(time)}")

    mask = (time >= t_ignore) & (time <= t_end_use)
    if np.count_nonzero(mask) < min_samples:
        return None

    trimmed = {'time': time[mask]}
    for name, values in channels.items():
        trimmed[name] = np.asarray(values, dtype=float)[mask]
    return trimmed


# ── Segmentation ───────────────────────────────────────────────────────────────

def window_starts(win_sec, step_sec, t_ignore, t_end_use):
    """
    Start times of every candidate window.

    Starts are t_ignore + k * step_sec for all k with
    t0 + win_sec <= t_end_use. Starts are computed from k rather than
    by repeated addition; a tolerance of 1e-9 hops absorbs rounding so
    that e.g. 1.0 .. 8.8 in 0.1 steps gives exactly 79 starts.

    Returns
    -------
    starts : array — window start times [s], possibly empty
    """
    if win_sec <= 0 or step_sec <= 0:
        raise ValueError("win_sec and step_sec must be positive")

    span = t_end_use - t_ignore - win_sec
    if span < -1e-9 * step_sec:
        return np.empty(0)

    n_windows = int(np.floor(span / step_sec + 1e-9)) + 1
    return t_ignore + np.arange(n_windows) * step_sec


def segment_windows(trimmed, win_sec, step_sec, t_ignore, t_end_use,
                    min_samples=DEFAULT_SETTINGS['min_window_samples']):
    """
    Lazily slice a trimmed run into half-open windows [t0, t0 + win_sec).

    Windows overlap when step_sec < win_sec. Windows holding fewer than
    min_samples samples are skipped without being yielded. Calling the
    function again on the same inputs restarts the sequence and yields
    identical windows.

    Parameters
    ----------
    trimmed     : dict  — output of trim_signals
    win_sec     : float — window length [s]
    step_sec    : float — hop between window starts [s]
    t_ignore    : float — first window start [s]
    t_end_use   : float — no window extends past this time [s]
    min_samples : int   — minimum samples per emitted window

    Yields
    ------
    t0      : float — window start time [s]
    segment : dict  — channel key -> samples inside the window
    """
    t = trimmed['time']

    for t0 in window_starts(win_sec, step_sec, t_ignore, t_end_use):
        idx = (t >= t0) & (t < t0 + win_sec)
        if np.count_nonzero(idx) < min_samples:
            continue
        yield float(t0), {name: trimmed[name][idx] for name in CHANNELS if name in trimmed}
