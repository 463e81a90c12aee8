"""
Build a labelled induction motor fault dataset from the command line. Usage:
  python -m imfaults --out data/imfaults_dataset.h5 --runs-healthy 20 --runs-fault 10

A JSON file given with --config supplies defaults; flags override it.
"""
import argparse
import warnings

from .config import DEFAULT_RUN_COUNTS, DEFAULT_SEED, load_config, merge_settings
from .dataset import build_dataset, save_dataset, RunSkippedWarning


# CLI flag -> settings key
SETTING_FLAGS = {
    'stop_time'   : 'stop_time',
    't_ignore'    : 't_ignore',
    't_end'       : 't_end_use',
    'win'         : 'win_sec',
    'step'        : 'step_sec',
    'v_phase'     : 'base_voltage',
    't_base'      : 'base_torque',
}


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Build an induction motor fault dataset.')
    parser.add_argument('--out', default='IMFaults_dataset.h5', help='Output file (.h5, .hdf5 or .mat)')
    parser.add_argument('--config', default=None, help='JSON config with settings, run_counts and seed')
    parser.add_argument('--stop-time', type=float, help='Simulation stop time [s]')
    parser.add_argument('--t-ignore', type=float, help='Ignore samples before this time [s]')
    parser.add_argument('--t-end', type=float, help='Ignore samples after this time [s]')
    parser.add_argument('--win', type=float, help='Window length [s]')
    parser.add_argument('--step', type=float, help='Hop between windows [s]')
    parser.add_argument('--v-phase', type=float, help='Line-to-neutral voltage [V]')
    parser.add_argument('--t-base', type=float, help='Nominal mechanical torque [Nm]')
    parser.add_argument('--runs-healthy', type=int, help='Runs for class 0')
    parser.add_argument('--runs-fault', type=int, help='Runs for each fault class (1-3)')
    parser.add_argument('--seed', type=int, help='Random seed')
    parser.add_argument('--fail-fast', action='store_true', help='Abort on the first simulator error')
    parser.add_argument('--strict', action='store_true', help='Treat skipped runs as errors')
    parser.add_argument('--quiet', action='store_true', help='Suppress per-run progress')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    try:
        if args.config:
            cfg = load_config(args.config)
        else:
            cfg = {'settings': merge_settings(), 'run_counts': dict(DEFAULT_RUN_COUNTS), 'seed': DEFAULT_SEED}

        overrides = {key: getattr(args, flag) for flag, key in SETTING_FLAGS.items()
                     if getattr(args, flag) is not None}
        settings  = merge_settings({**cfg['settings'], **overrides})
    except ValueError as exc:
        raise SystemExit(f'Invalid configuration: {exc}')

    run_counts = cfg['run_counts']
    if args.runs_healthy is not None:
        run_counts[0] = args.runs_healthy
    if args.runs_fault is not None:
        for class_id in (1, 2, 3):
            run_counts[class_id] = args.runs_fault

    seed = args.seed if args.seed is not None else cfg['seed']

    with warnings.catch_warnings():
        if args.strict:
            warnings.simplefilter('error', RunSkippedWarning)
        dataset = build_dataset(run_counts=run_counts, settings=settings, seed=seed,
                                fail_fast=args.fail_fast, verbose=not args.quiet)

    save_dataset(dataset, args.out)
    print('Windows per class:', dataset.class_counts())
    return dataset


if __name__ == '__main__':
    main()
