"""
Entry point tests
run.py end to end on simulated scenarios
"""

import logging

import run


def _pattern_lines(caplog):
    return [r.getMessage() for r in caplog.records if 'confidence=' in r.getMessage()]


def test_tap_scenario_logs_tap(caplog):
    caplog.set_level(logging.INFO)
    assert run.main(['--scenario', 'tap', '--duration', '1', '--seed', '3']) == 0

    lines = _pattern_lines(caplog)
    assert any('Finger Tap' in line for line in lines)


def test_every_emitted_pattern_is_logged(caplog, monkeypatch):
    emitted = []
    process = run.FusionOrchestrator.process

    def recording_process(self, *args, **kwargs):
        result = process(self, *args, **kwargs)
        emitted.extend(result.patterns)
        return result

    monkeypatch.setattr(run.FusionOrchestrator, 'process', recording_process)
    caplog.set_level(logging.INFO)
    run.main(['--scenario', 'hand', '--duration', '1', '--seed', '3', '--no-calibration'])

    assert emitted
    assert len(_pattern_lines(caplog)) == len(emitted)
