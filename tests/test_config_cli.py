import json

import pytest

from imfaults.config import load_config, merge_settings, DEFAULT_SETTINGS
from imfaults.cli import main
from imfaults.dataset import load_dataset


class TestSettings:
    def test_defaults(self):
        settings = merge_settings()
        assert settings == DEFAULT_SETTINGS
        assert settings is not DEFAULT_SETTINGS

    def test_override(self):
        assert merge_settings({'win_sec': 0.5})['win_sec'] == 0.5

    @pytest.mark.parametrize('overrides', [
        {'window': 0.2},
        {'step_sec': 0.0},
        {'t_ignore': 9.0, 't_end_use': 9.0},
        {'min_window_samples': 0},
    ])
    def test_invalid(self, overrides):
        with pytest.raises(ValueError):
            merge_settings(overrides)

    def test_thresholds_are_the_algorithm_defaults(self):
        import inspect
        from imfaults.windowing import trim_signals, segment_windows
        from imfaults.features import extract_features, unbalance_index

        def default(func, name):
            return inspect.signature(func).parameters[name].default

        assert default(trim_signals, 'min_samples') == DEFAULT_SETTINGS['min_run_samples'] == 10
        assert default(segment_windows, 'min_samples') == DEFAULT_SETTINGS['min_window_samples'] == 5
        assert default(extract_features, 'eps') == DEFAULT_SETTINGS['unbalance_eps'] == 1e-6
        assert default(unbalance_index, 'eps') == DEFAULT_SETTINGS['unbalance_eps']


class TestLoadConfig:
    def test_partial_file(self, tmp_path):
        path = tmp_path / 'build.json'
        path.write_text(json.dumps({'settings': {'step_sec': 0.05},
                                    'run_counts': {'0': 4, '3': 2},
                                    'seed': 9}))
        cfg = load_config(str(path))

        assert cfg['settings']['step_sec'] == 0.05
        assert cfg['settings']['win_sec'] == DEFAULT_SETTINGS['win_sec']
        assert cfg['run_counts'] == {0: 4, 3: 2}
        assert cfg['seed'] == 9

    def test_unknown_section(self, tmp_path):
        path = tmp_path / 'build.json'
        path.write_text(json.dumps({'model': 'IMFaults'}))
        with pytest.raises(ValueError):
            load_config(str(path))


class TestCli:
    def test_builds_and_saves(self, tmp_path, capsys):
        out = tmp_path / 'small.h5'
        main(['--out', str(out), '--runs-healthy', '1', '--runs-fault', '0',
              '--stop-time', '2.5', '--t-end', '2.0', '--quiet'])

        ds = load_dataset(out)
        assert len(ds) == 9
        assert set(ds.y.tolist()) == {0}
        assert 'Saved 9 windows' in capsys.readouterr().out

    def test_invalid_configuration_exits(self, tmp_path):
        with pytest.raises(SystemExit):
            main(['--out', str(tmp_path / 'x.h5'), '--t-ignore', '5', '--t-end', '4'])


class TestCliRunControl:
    @pytest.fixture
    def stub_motor(self, monkeypatch):
        import imfaults.dataset as dataset_module
        from conftest import make_constant_simulator

        simulator = make_constant_simulator()
        monkeypatch.setattr(dataset_module, 'simulate_induction_motor', simulator)
        return simulator

    def test_config_run_counts_with_fault_override(self, tmp_path, stub_motor):
        cfg = tmp_path / 'build.json'
        cfg.write_text(json.dumps({'run_counts': {'0': 1, '1': 5, '2': 5}, 'seed': 2}))
        out = tmp_path / 'ds.h5'

        main(['--config', str(cfg), '--runs-fault', '0', '--out', str(out), '--quiet'])

        ds = load_dataset(out)
        assert len(stub_motor.calls) == 1
        assert set(ds.y.tolist()) == {0}
        assert list(ds.metadata['num_runs_per_class']) == [1, 0, 0, 0]
        assert ds.metadata['seed'] == 2

    def test_strict_turns_skipped_run_into_error(self, tmp_path, monkeypatch):
        import imfaults.dataset as dataset_module
        from imfaults.dataset import RunSkippedWarning

        def broken(params, stop_time):
            raise RuntimeError('solver diverged')

        monkeypatch.setattr(dataset_module, 'simulate_induction_motor', broken)
        out = tmp_path / 'ds.h5'

        with pytest.raises(RunSkippedWarning):
            main(['--out', str(out), '--runs-healthy', '1', '--runs-fault', '0',
                  '--strict', '--quiet'])
        assert not out.exists()

    def test_without_strict_skipped_runs_still_save(self, tmp_path, monkeypatch):
        import imfaults.dataset as dataset_module
        from imfaults.dataset import RunSkippedWarning

        def broken(params, stop_time):
            raise RuntimeError('solver diverged')

        monkeypatch.setattr(dataset_module, 'simulate_induction_motor', broken)
        out = tmp_path / 'ds.h5'

        with pytest.warns(RunSkippedWarning):
            main(['--out', str(out), '--runs-healthy', '1', '--runs-fault', '0', '--quiet'])
        assert len(load_dataset(out)) == 0

    def test_fail_fast_propagates_simulator_error(self, tmp_path, monkeypatch):
        import imfaults.dataset as dataset_module

        def broken(params, stop_time):
            raise RuntimeError('no license')

        monkeypatch.setattr(dataset_module, 'simulate_induction_motor', broken)

        with pytest.raises(RuntimeError, match='no license'):
            main(['--out', str(tmp_path / 'ds.h5'), '--runs-healthy', '1',
                  '--runs-fault', '0', '--fail-fast', '--quiet'])
