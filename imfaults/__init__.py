"""
imfaults — Induction Motor Fault Dataset Builder

Builds a labelled window-level feature dataset for fault classification of
a three-phase induction motor from repeated, randomised simulation runs.

Modules
-------
config     : Default settings, fault class table and JSON config loading
parameters : Per-class randomised torque factor and phase voltage offsets
windowing  : Usable-interval trimming and sliding-window segmentation
features   : 10-element window feature vector (RMS, unbalance, mean/std)
motor      : Reference per-unit induction motor simulator
dataset    : Build loop, Dataset container, train/test split and HDF5/.mat I/O
cli        : Command line entry point
"""

from .config     import FAULT_CLASSES, CHANNELS, TRACE_NAMES, DEFAULT_SETTINGS, DEFAULT_RUN_COUNTS, load_config, merge_settings
from .parameters import random_params_for_class, InvalidClassError
from .windowing  import trim_signals, window_starts, segment_windows
from .features   import rms, unbalance_index, extract_features, extract_window_features, FEATURE_NAMES
from .motor      import simulate_induction_motor, DEFAULT_MOTOR
from .dataset    import Dataset, build_dataset, run_windows, split_dataset, save_dataset, load_dataset, RunSkippedWarning
