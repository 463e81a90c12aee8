"""
dataset.py — Labelled Dataset Assembly, Splitting and I/O

Drives the full build loop and owns the resulting in-memory dataset:

    for each class (0..3), for each run:
        draw parameters -> simulate -> trim -> window -> extract features

Each run gets its own random generator derived from (seed, class, run), so
a build is exactly reproducible and does not depend on run order.
Per-run failures are reported as RunSkippedWarning and never abort the
build. Rows are appended once per run and stacked once at the end.

Usage
-----
    from imfaults import build_dataset, save_dataset

    ds = build_dataset(run_counts={0: 20, 1: 10, 2: 10, 3: 10}, seed=0)
    save_dataset(ds, 'data/imfaults_dataset.h5')
"""

import warnings

import numpy as np
import h5py
from scipy.io import savemat, loadmat
from sklearn.model_selection import train_test_split, GroupShuffleSplit

from .config import (FAULT_CLASSES, TRACE_NAMES, DEFAULT_RUN_COUNTS,
                     DEFAULT_SEED, merge_settings)
from .parameters import random_params_for_class, InvalidClassError
from .windowing import trim_signals, segment_windows
from .features import extract_window_features, N_FEATURES, FEATURE_NAMES
from .motor import simulate_induction_motor


class RunSkippedWarning(UserWarning):
    """A single run contributed no windows (too few samples or simulator failure)."""


# ── Dataset ────────────────────────────────────────────────────────────────────

class Dataset:
    """
    Read-only feature matrix, label vector and provenance metadata.

    Rows are in (class, run, window start) order. That order carries no
    meaning; shuffle before splitting.

    Attributes
    ----------
    X        : array (n x 10) — features, columns in FEATURE_NAMES order
    y        : array (n,)     — class labels 0-3
    run_ids  : array (n,)     — global run counter of the run each row came from
    metadata : dict           — window/time settings, seed, run counts
    """

    def __init__(self, X, y, metadata, run_ids=None):
        X = np.array(X, dtype=float).reshape(-1, N_FEATURES)
        y = np.array(y, dtype=int).ravel()
        if run_ids is None:
            run_ids = np.zeros(len(y), dtype=int)
        run_ids = np.array(run_ids, dtype=int).ravel()

        if not len(X) == len(y) == len(run_ids):
            raise ValueError(
                f"Row count mismatch: X={len(X)}, y={len(y)}, run_ids={len(run_ids)}")

        for arr in (X, y, run_ids):
            arr.flags.writeable = False

        self._X        = X
        self._y        = y
        self._run_ids  = run_ids
        # Sequence values stored as tuples so metadata copies cannot alias them
        self._metadata = {key: tuple(value) if isinstance(value, (list, tuple, np.ndarray)) else value
                          for key, value in dict(metadata).items()}

    @property
    def X(self):
        return self._X

    @property
    def y(self):
        return self._y

    @property
    def run_ids(self):
        return self._run_ids

    @property
    def metadata(self):
        return dict(self._metadata)

    @property
    def n_features(self):
        return self._X.shape[1]

    @property
    def feature_names(self):
        return list(FEATURE_NAMES)

    def __len__(self):
        return len(self._y)

    def class_counts(self):
        """Number of windows per class id (every known class listed)."""
        return {c: int(np.count_nonzero(self._y == c)) for c in FAULT_CLASSES}

    def summary(self):
        return f"{len(self)} windows with {self.n_features} features each"


# ── Build Loop ─────────────────────────────────────────────────────────────────

def _check_run_counts(run_counts):
    for class_id, n_runs in run_counts.items():
        if class_id not in FAULT_CLASSES:
            raise InvalidClassError(f"Unknown classId {class_id!r} in run counts")
        if n_runs < 0:
            raise ValueError(f"Negative run count {n_runs} for class {class_id}")


def _unpack_traces(traces):
    """
    Common time base and channel arrays from a simulator's trace dict.

    The time base of phase current A is used for all channels.
    """
    missing = [name for name in TRACE_NAMES.values() if name not in traces]
    if missing:
        raise KeyError(f"Simulator output is missing traces: {missing}")

    time, _ = traces[TRACE_NAMES['ia']]
    time    = np.asarray(time, dtype=float).ravel()

    channels = {}
    for key, name in TRACE_NAMES.items():
        _, values = traces[name]
        values    = np.asarray(values, dtype=float).ravel()
        if len(values) != len(time):
            raise ValueError(
                f"Trace '{name}' has {len(values)} samples, time base has {len(time)}")
        channels[key] = values

    return time, channels


def run_windows(time, channels, settings):
    """
    Feature rows for one simulated run.

    Parameters
    ----------
    time     : array — common time base [s]
    channels : dict  — channel key -> values, as returned by _unpack_traces
    settings : dict  — full build settings

    Returns
    -------
    rows : array (n_windows x 10), or None if the run is rejected by trimming
    """
    trimmed = trim_signals(time, channels,
                           settings['t_ignore'], settings['t_end_use'],
                           min_samples=settings['min_run_samples'])
    if trimmed is None:
        return None

    rows = [
        extract_window_features(segment, eps=settings['unbalance_eps'])
        for _, segment in segment_windows(trimmed,
                                          settings['win_sec'], settings['step_sec'],
                                          settings['t_ignore'], settings['t_end_use'],
                                          min_samples=settings['min_window_samples'])
    ]
    if not rows:
        return np.empty((0, N_FEATURES))
    return np.vstack(rows)


def build_dataset(simulator=None, run_counts=None, settings=None,
                  seed=DEFAULT_SEED, fail_fast=False, verbose=True):
    """
    Simulate every (class, run) pair and assemble the labelled dataset.

    Parameters
    ----------
    simulator  : callable — simulator(params, stop_time) -> trace dict
                            (uses simulate_induction_motor if None)
    run_counts : dict     — class id -> number of runs (DEFAULT_RUN_COUNTS if None)
    settings   : dict     — overrides for DEFAULT_SETTINGS
    seed       : int      — master seed; each run draws from (seed, class, run)
    fail_fast  : bool     — re-raise simulator errors instead of skipping the run
    verbose    : bool     — print per-run progress and the final summary

    Returns
    -------
    dataset : Dataset
    """
    simulator  = simulator or simulate_induction_motor
    run_counts = dict(DEFAULT_RUN_COUNTS if run_counts is None else run_counts)
    settings   = merge_settings(settings)
    _check_run_counts(run_counts)

    blocks, labels, run_ids = [], [], []
    run_counter  = 0
    runs_skipped = 0

    for class_id in sorted(run_counts):
        for k in range(1, run_counts[class_id] + 1):
            run_counter += 1
            rng = np.random.default_rng([seed, class_id, k])

            t_factor, d_a, d_b, d_c = random_params_for_class(class_id, rng)
            params = {
                'torque_factor': t_factor,
                'delta_a'      : d_a,
                'delta_b'      : d_b,
                'delta_c'      : d_c,
                'base_voltage' : settings['base_voltage'],
                'base_torque'  : settings['base_torque'],
            }

            if verbose:
                print(f"Class {class_id} run {k}: T_FACTOR={t_factor:.2f}, "
                      f"dA={d_a:.2f}, dB={d_b:.2f}, dC={d_c:.2f}")

            try:
                traces         = simulator(params, settings['stop_time'])
                time, channels = _unpack_traces(traces)
            except Exception as exc:
                if fail_fast:
                    raise
                warnings.warn(f"Class {class_id} run {k}: simulation failed ({exc!r}), skipping.",
                              RunSkippedWarning, stacklevel=2)
                runs_skipped += 1
                continue

            rows = run_windows(time, channels, settings)
            if rows is None:
                warnings.warn(f"Class {class_id} run {k}: not enough samples after "
                              f"t_ignore, skipping.", RunSkippedWarning, stacklevel=2)
                runs_skipped += 1
                continue

            blocks.append(rows)
            labels.append(np.full(len(rows), class_id, dtype=int))
            run_ids.append(np.full(len(rows), run_counter, dtype=int))

    per_class = [int(run_counts.get(c, 0)) for c in FAULT_CLASSES]
    metadata  = {
        'win_sec'           : settings['win_sec'],
        'step_sec'          : settings['step_sec'],
        't_ignore'          : settings['t_ignore'],
        't_end_use'         : settings['t_end_use'],
        'stop_time'         : settings['stop_time'],
        'base_voltage'      : settings['base_voltage'],
        'base_torque'       : settings['base_torque'],
        'seed'              : int(seed),
        'num_runs_per_class': per_class,
        'runs_skipped'      : runs_skipped,
    }

    if blocks:
        dataset = Dataset(np.vstack(blocks), np.concatenate(labels),
                          metadata, run_ids=np.concatenate(run_ids))
    else:
        dataset = Dataset(np.empty((0, N_FEATURES)), np.empty(0, dtype=int), metadata)

    if verbose:
        print(f"\nBuilt {dataset.summary()} ({runs_skipped} runs skipped)")

    return dataset


# ── Train / Test Split ─────────────────────────────────────────────────────────

def split_dataset(dataset, test_size=0.2, seed=0, by_run=False):
    """
    Shuffled train/test split of a dataset.

    Overlapping windows of one run are strongly correlated; by_run=True
    keeps every run entirely on one side of the split.

    Parameters
    ----------
    dataset   : Dataset
    test_size : float — fraction of rows (or runs, if by_run) held out
    seed      : int   — shuffling seed
    by_run    : bool  — split by run id instead of by row

    Returns
    -------
    X_train, X_test, y_train, y_test : arrays
    """
    X, y = dataset.X, dataset.y

    if len(y) == 0:
        raise ValueError("Cannot split an empty dataset (every run was skipped?)")

    if by_run:
        splitter = GroupShuffleSplit(n_splits=1, test_size=test_size, random_state=seed)
        train_idx, test_idx = next(splitter.split(X, y, groups=dataset.run_ids))
        return X[train_idx], X[test_idx], y[train_idx], y[test_idx]

    # Stratify only when every present class can appear on both sides
    _, counts = np.unique(y, return_counts=True)
    n_test    = int(np.ceil(test_size * len(y))) if isinstance(test_size, float) else int(test_size)
    n_train   = len(y) - n_test
    can_stratify = counts.min() >= 2 and min(n_test, n_train) >= len(counts)
    stratify  = y if can_stratify else None
    return train_test_split(X, y, test_size=test_size,
                            random_state=seed, shuffle=True, stratify=stratify)


# ── Dataset I/O ────────────────────────────────────────────────────────────────

# Metadata key -> MATLAB variable name in .mat dataset files
MAT_KEYS = {
    'win_sec'           : 'winSec',
    'step_sec'          : 'stepSec',
    't_ignore'          : 'tIgnore',
    't_end_use'         : 'tEndUse',
    'stop_time'         : 'tStop',
    'base_voltage'      : 'V_phase',
    'base_torque'       : 'T_BASE',
    'seed'              : 'seed',
    'num_runs_per_class': 'numRunsPerClass',
    'runs_skipped'      : 'runsSkipped',
}


def _to_python(value):
    value = np.asarray(value)
    if value.ndim == 0:
        return value.item()
    return value.ravel().tolist()


def save_dataset(dataset, file_path, compression='gzip', compression_opts=6, verbose=True):
    """
    Save a dataset to HDF5 (.h5/.hdf5) or MATLAB (.mat).

    HDF5 layout: datasets 'X', 'y', 'run_ids'; metadata as root attributes.
    MATLAB layout: variables 'X', 'y' (column), 'runIds' and one variable
    per metadata field (see MAT_KEYS), plus 'numRunsHealthy' and
    'numRunsFault'. 'numRunsFault' is a scalar when classes 1-3 share one
    run count and a 3-element vector (classes 1, 2, 3) otherwise.

    Parameters
    ----------
    dataset          : Dataset
    file_path        : str — output path; the extension selects the format
    compression      : str — HDF5 compression algorithm
    compression_opts : int — compression level (1-9)
    verbose          : bool — print a confirmation line
    """
    path = str(file_path)
    meta = dataset.metadata

    if path.endswith('.mat'):
        counts = meta.get('num_runs_per_class', (0,) * len(FAULT_CLASSES))
        fault  = counts[1:]
        mdict  = {
            'X'             : np.asarray(dataset.X),
            'y'             : np.asarray(dataset.y).reshape(-1, 1),
            'runIds'        : np.asarray(dataset.run_ids).reshape(-1, 1),
            'numRunsHealthy': counts[0],
            'numRunsFault'  : fault[0] if len(set(fault)) == 1 else np.asarray(fault),
        }
        for key, mat_name in MAT_KEYS.items():
            if key in meta:
                mdict[mat_name] = np.asarray(meta[key])
        savemat(path, mdict)

    elif path.endswith(('.h5', '.hdf5')):
        with h5py.File(path, 'w') as hdf:
            for name, data in (('X', dataset.X), ('y', dataset.y), ('run_ids', dataset.run_ids)):
                # Zero-row datasets cannot be chunked, so store them uncompressed
                if len(dataset):
                    hdf.create_dataset(name, data=np.asarray(data),
                                       compression=compression,
                                       compression_opts=compression_opts)
                else:
                    hdf.create_dataset(name, data=np.asarray(data))
            for key, value in meta.items():
                hdf.attrs[key] = value

    else:
        raise ValueError(f"Unsupported dataset file extension: {path}")

    if verbose:
        print(f"Saved {dataset.summary()} to {path}")


def load_dataset(file_path):
    """
    Load a dataset written by save_dataset.

    Parameters
    ----------
    file_path : str — .h5/.hdf5 or .mat path

    Returns
    -------
    dataset : Dataset
    """
    path = str(file_path)

    if path.endswith('.mat'):
        mat      = loadmat(path, squeeze_me=True)
        metadata = {key: _to_python(mat[mat_name])
                    for key, mat_name in MAT_KEYS.items() if mat_name in mat}
        run_ids  = np.ravel(mat['runIds']) if 'runIds' in mat else None
        return Dataset(mat['X'], np.ravel(mat['y']), metadata, run_ids=run_ids)

    if path.endswith(('.h5', '.hdf5')):
        with h5py.File(path, 'r') as hdf:
            X        = hdf['X'][:]
            y        = hdf['y'][:]
            run_ids  = hdf['run_ids'][:] if 'run_ids' in hdf else None
            metadata = {key: _to_python(value) for key, value in hdf.attrs.items()}
        return Dataset(X, y, metadata, run_ids=run_ids)

    raise ValueError(f"Unsupported dataset file extension: {path}")
