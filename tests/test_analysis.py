"""
Motion analysis and classification tests
Window features, gesture templates and the three classification strategies
"""

import math

import numpy as np
import pytest

from motion_fusion.analysis import (
    AnalysisConfig,
    GestureWindow,
    MotionAnalyzer,
    PatternClassifier,
    PatternHistory,
)
from motion_fusion.analysis.analyzer import autocorrelation_spectrum, window_duration
from motion_fusion.analysis.templates import score_pinch, score_rotation, score_swipe, score_tap
from motion_fusion.models import (
    CompensatedSample,
    DetectedPattern,
    FingerMovement,
    MotionSample,
    PatternKind,
    PatternLabel,
    SensorRole,
)

PERIOD_MS = 20.0


def _hand(ax=0.0, ay=0.0, az=0.0, gx=0.0, gy=0.0, gz=0.0, t=0.0):
    return MotionSample(ax, ay, az, gx, gy, gz, timestamp=t, sensor_id=SensorRole.HAND)


def _finger(ax=0.0, ay=0.0, az=0.0, gx=0.0, gy=0.0, gz=0.0, t=0.0):
    return MotionSample(ax, ay, az, gx, gy, gz, timestamp=t, sensor_id=SensorRole.FINGER)


def _comp(ax=0.0, ay=0.0, az=0.0, gx=0.0, gy=0.0, gz=0.0, t=0.0):
    return CompensatedSample(ax, ay, az, gx, gy, gz, timestamp=t)


def _series(factory, values, **fixed):
    """One sample per ax value, PERIOD_MS apart."""
    return [factory(ax=v, t=i * PERIOD_MS, **fixed) for i, v in enumerate(values)]


@pytest.fixture
def analyzer():
    return MotionAnalyzer(AnalysisConfig())


# ---------------------------------------------------------------------------
# Window features
# ---------------------------------------------------------------------------

def test_magnitude_stats(analyzer):
    values = np.arange(1, 11, dtype=float)
    stats = analyzer.magnitude_stats(_series(_hand, values))
    assert stats.mean == pytest.approx(5.5)
    assert stats.peak == pytest.approx(10.0)
    assert stats.variance == pytest.approx(float(np.var(values)))
    assert stats.direction_changes == 0


def test_direction_changes_count_heading_flips(analyzer):
    alternating = [1.0 if i % 2 == 0 else -1.0 for i in range(10)]
    stats = analyzer.magnitude_stats(_series(_hand, alternating, ay=0.0))
    assert stats.direction_changes == 9


def test_direction_change_on_first_pair_is_counted(analyzer):
    # Heading flips only between samples 0 and 1
    stats = analyzer.magnitude_stats(_series(_hand, [-1.0] + [1.0] * 9, ay=0.0))
    assert stats.direction_changes == 1


def test_short_window_is_neutral(analyzer):
    short = _series(_hand, [1.0] * 9)
    assert analyzer.magnitude_stats(short) is None
    assert analyzer.correlation(short, short) == 0.0
    assert analyzer.coarse_frequency_spectrum(short).size == 0
    assert analyzer.spatial_complexity(short) == 0.0
    assert analyzer.temporal_consistency(short) == 0.0
    assert analyzer.analyze_window(short, short, []) is None


def test_correlation(analyzer):
    rising = np.arange(1, 11, dtype=float)
    hand = _series(_hand, rising)
    assert analyzer.correlation(hand, _series(_finger, rising * 2)) == pytest.approx(1.0)
    assert analyzer.correlation(hand, _series(_finger, rising[::-1])) == pytest.approx(-1.0)
    assert analyzer.correlation(hand, _series(_finger, [3.0] * 10)) == 0.0
    assert analyzer.correlation(hand, _series(_finger, rising[:-1].tolist() + [1.0] * 2)) == 0.0


def test_correlation_bounded(analyzer):
    rng = np.random.default_rng(5)
    for _ in range(20):
        hand = _series(_hand, rng.normal(0, 3, 30))
        finger = _series(_finger, rng.normal(0, 3, 30))
        assert -1.0 <= analyzer.correlation(hand, finger) <= 1.0


@pytest.mark.parametrize("n, expected", [(10, 4), (25, 11), (100, 19)])
def test_frequency_spectrum_length(analyzer, n, expected):
    spectrum = analyzer.coarse_frequency_spectrum(_series(_hand, [1.0] * n))
    assert spectrum.shape == (expected,)


def test_autocorrelation_of_constant_signal():
    spectrum = autocorrelation_spectrum(np.full(12, 2.0))
    assert spectrum == pytest.approx([4.0] * 5)


def test_spatial_complexity(analyzer):
    still = [_comp(ax=1.0, ay=1.0, t=i * PERIOD_MS) for i in range(12)]
    assert analyzer.spatial_complexity(still) == 0.0

    straight = _series(_comp, np.linspace(0.0, 5.0, 12))
    assert analyzer.spatial_complexity(straight) == pytest.approx(1.0)

    zigzag = _series(_comp, [0.0, 2.0] * 5 + [0.0, 1.0])
    assert analyzer.spatial_complexity(zigzag) > 1.0


def test_temporal_consistency(analyzer):
    steady = _series(_comp, [1.0] * 12)
    assert analyzer.temporal_consistency(steady) == pytest.approx(1.0)

    erratic = _series(_comp, [0.0, 10.0] * 6)
    assert analyzer.temporal_consistency(erratic) == 0.0


def test_analyze_window(analyzer):
    hand = _series(_hand, [1.0] * 12)
    finger = _series(_finger, [2.0] * 12)
    compensated = _series(_comp, [1.0] * 12)

    analysis = analyzer.analyze_window(hand, finger, compensated)

    assert analysis.hand_motion.mean == pytest.approx(1.0)
    assert analysis.finger_independence == pytest.approx(1.0 / 2.001)
    assert analysis.duration == pytest.approx(11 * PERIOD_MS)
    assert analysis.hand_frequencies.shape == (5,)


def test_window_duration():
    assert window_duration([]) == 0.0
    assert window_duration(_series(_hand, [0.0])) == 0.0
    assert window_duration(_series(_hand, [0.0] * 6)) == pytest.approx(100.0)


@pytest.mark.parametrize("accel, gyro, expected", [
    (3.0, 0.0, FingerMovement.ACTIVE_FLEXION),
    (1.0, 45.0, FingerMovement.ROTATION),
    (1.0, 10.0, FingerMovement.SUBTLE),
    (0.2, 5.0, FingerMovement.RELATIVE_REST),
])
def test_classify_finger_movement(accel, gyro, expected):
    assert MotionAnalyzer.classify_finger_movement(accel, gyro) == expected


def test_stream_energy(analyzer):
    assert analyzer.stream_energy(_series(_hand, [1.0] * 15)) is None

    hand = analyzer.stream_energy(_series(_hand, [1.0] * 16))
    assert hand.energy == pytest.approx(0.0)
    assert hand.finger_movement is None

    compensated = analyzer.stream_energy(_series(_comp, [0.0, 6.0] * 8))
    assert compensated.energy == pytest.approx(9.0)
    assert compensated.finger_movement == FingerMovement.ACTIVE_FLEXION


def test_motion_metrics(analyzer):
    static = analyzer.motion_metrics(_hand(), _finger(), _comp())
    assert static.motion_type == 'static'
    assert static.correlation_coefficient == 0.0

    hand = _hand(ax=1.0, gz=200.0)
    finger = _finger(ax=1.0, ay=1.0)
    compensated = _comp(ay=1.0)
    metrics = analyzer.motion_metrics(hand, finger, compensated)
    assert metrics.motion_type == 'rotational'
    assert metrics.dominant_axis == 'y'
    assert metrics.correlation_coefficient == pytest.approx(1 / math.sqrt(2))
    assert metrics.independent_motion_ratio == pytest.approx(1.0 / (math.sqrt(2) + 0.001))


# ---------------------------------------------------------------------------
# Gesture templates
# ---------------------------------------------------------------------------

def _window(hand=(), finger=(), compensated=()):
    source = compensated if compensated else hand
    return GestureWindow(
        hand=list(hand),
        finger=list(finger),
        compensated=list(compensated),
        duration=window_duration(source),
    )


def test_tap_scores_sharp_short_peak():
    compensated = _series(_comp, [0.0] * 15 + [1.0])
    assert score_tap(_window(compensated=compensated)) == pytest.approx(1.0)


def test_tap_ignores_flat_window():
    compensated = _series(_comp, [0.0] * 16)
    assert score_tap(_window(compensated=compensated)) == pytest.approx(0.5)


def test_swipe_scores_steady_ramp():
    compensated = _series(_comp, np.linspace(0.0, 12.0, 25))
    assert score_swipe(_window(compensated=compensated)) == pytest.approx(0.5)
    steep = _series(_comp, np.linspace(0.0, 48.0, 25))
    assert score_swipe(_window(compensated=steep)) == pytest.approx(1.0)


def _pinch_window(hand_g, finger_g, count, duration):
    return GestureWindow(
        hand=_series(_hand, [hand_g] * count),
        finger=[],
        compensated=_series(_comp, [finger_g] * count),
        duration=duration,
    )


def test_pinch_scores_coordinated_motion():
    # coordination = min(3 / 2, 2 / 1.5) > 1
    assert score_pinch(_pinch_window(3.0, 2.0, 20, 950.0)) == pytest.approx(1.0)


def test_pinch_needs_fifteen_samples():
    assert score_pinch(_pinch_window(3.0, 2.0, 14, 950.0)) == 0.0


def test_pinch_needs_more_than_300_ms():
    assert score_pinch(_pinch_window(3.0, 2.0, 20, 300.0)) == 0.0


def test_pinch_decays_past_two_seconds():
    # coordination = 1.0, duration term = 2000 / 4000
    assert score_pinch(_pinch_window(2.0, 1.5, 20, 4000.0)) == pytest.approx(0.5)


def test_rotation_needs_long_window():
    spinning = [_hand(gz=200.0, t=i * PERIOD_MS) for i in range(20)]
    assert score_rotation(_window(hand=spinning)) == 0.0

    spinning = [_hand(gz=200.0, t=i * PERIOD_MS) for i in range(30)]
    assert score_rotation(_window(hand=spinning)) == pytest.approx(1.0)


# ---------------------------------------------------------------------------
# Classifier
# ---------------------------------------------------------------------------

@pytest.fixture
def classifier():
    return PatternClassifier(AnalysisConfig())


def test_threshold_names_dominant_hand(classifier):
    hand = _series(_hand, [8.0] * 10)
    finger = _series(_finger, [0.0] * 10)
    pattern = classifier.classify_threshold(hand, finger, 180.0)
    assert pattern.name == PatternLabel.HAND.value
    assert pattern.confidence == pytest.approx(1.0)
    assert pattern.kind == PatternKind.THRESHOLD
    assert pattern.id.startswith('pattern_')


def test_threshold_names_dominant_finger(classifier):
    hand = _series(_hand, [0.5] * 10)
    finger = _series(_finger, [3.0] * 10)
    pattern = classifier.classify_threshold(hand, finger, 180.0)
    assert pattern.name == PatternLabel.FINGER.value
    assert pattern.confidence == pytest.approx(0.6)


def test_threshold_silent_below_activity(classifier):
    hand = _series(_hand, [1.0] * 10)
    finger = _series(_finger, [1.5] * 10)
    assert classifier.classify_threshold(hand, finger, 0.0) is None
    assert classifier.classify_threshold(hand[:9], finger, 0.0) is None


def test_combined_rest(classifier):
    hand = _series(_hand, [0.0] * 16)
    compensated = _series(_comp, [0.0] * 16)
    pattern = classifier.classify_combined(hand, compensated, 300.0)
    assert pattern.name == PatternLabel.REST.value
    assert pattern.confidence == pytest.approx(0.9)
    assert pattern.kind == PatternKind.COMBINED


def test_combined_finger_dominant(classifier):
    hand = _series(_hand, [0.0] * 16)
    compensated = _series(_comp, [0.0, 6.0] * 8)
    pattern = classifier.classify_combined(hand, compensated, 300.0)
    assert pattern.name == f"Dedo: {FingerMovement.ACTIVE_FLEXION.value}"
    assert pattern.confidence == pytest.approx(0.88)


def test_combined_hand_only(classifier):
    hand = _series(_hand, [0.0, 10.0] * 8)
    compensated = _series(_comp, [0.0] * 16)
    pattern = classifier.classify_combined(hand, compensated, 300.0)
    # hand energy = 25
    assert pattern.name == PatternLabel.HAND.value
    assert pattern.confidence == pytest.approx(0.95)


def test_combined_coordinated(classifier):
    hand = _series(_hand, [0.0, 10.0] * 8)
    compensated = _series(_comp, [0.0, 6.0] * 8)
    pattern = classifier.classify_combined(hand, compensated, 300.0)
    # hand energy = 25, finger energy = 9
    assert pattern.name == PatternLabel.COORDINATED.value
    assert pattern.confidence == pytest.approx(0.95)


def test_combined_soft(classifier):
    hand = _series(_hand, [0.0, 4.0] * 8)
    compensated = _series(_comp, [0.0, 3.0] * 8)
    pattern = classifier.classify_combined(hand, compensated, 300.0)
    # total energy = 4 + 2.25
    assert pattern.name == PatternLabel.SOFT.value
    assert pattern.confidence == pytest.approx(0.725)


def test_combined_confidence_clamped_above(classifier):
    hand = _series(_hand, [0.0, 8.0] * 8)
    compensated = _series(_comp, [0.0, 6.0] * 8)
    pattern = classifier.classify_combined(hand, compensated, 300.0)
    # soft label with 0.6 + 25 / 50 = 1.1 before clamping
    assert pattern.name == PatternLabel.SOFT.value
    assert pattern.confidence == pytest.approx(0.99)


def test_combined_confidence_clamped_below():
    classifier = PatternClassifier(AnalysisConfig(min_combined_confidence=0.95))
    hand = _series(_hand, [0.0] * 16)
    pattern = classifier.classify_combined(hand, _series(_comp, [0.0] * 16), 300.0)
    assert pattern.name == PatternLabel.REST.value
    assert pattern.confidence == pytest.approx(0.95)


def test_gesture_carries_template_profile(classifier):
    hand = _series(_hand, [0.0] * 16)
    compensated = _series(_comp, [0.0] * 15 + [1.0])
    result = classifier.classify(hand, hand, compensated, 300.0)

    tap = result.patterns[-1]
    assert tap.name == PatternLabel.TAP.value
    assert tap.characteristics['gesture_type'] == 'tap'
    assert tap.characteristics['template_profile']['duration_range'] == (100, 500)
    assert tap.characteristics['template_profile']['correlation_range'] == (-0.3, 0.3)


def test_combined_needs_sixteen_samples(classifier):
    hand = _series(_hand, [0.0] * 15)
    assert classifier.classify_combined(hand, hand, 0.0) is None


def test_classify_records_confident_patterns(classifier):
    hand = _series(_hand, [0.0] * 16)
    finger = _series(_finger, [0.0] * 16)
    compensated = _series(_comp, [0.0] * 16)

    result = classifier.classify(hand, finger, compensated, 300.0)

    assert classifier.current.name == PatternLabel.REST.value
    assert [p.name for p in result.patterns] == [PatternLabel.REST.value]
    assert len(classifier.history) == 1


def test_classify_template_overrides_combined(classifier):
    hand = _series(_hand, [0.0] * 16)
    finger = _series(_finger, [0.0] * 15 + [1.0])
    compensated = _series(_comp, [0.0] * 15 + [1.0])

    result = classifier.classify(hand, finger, compensated, 300.0)

    assert classifier.current.name == PatternLabel.TAP.value
    assert [p.kind for p in result.patterns] == [PatternKind.COMBINED, PatternKind.GESTURE]


def test_history_is_bounded():
    classifier = PatternClassifier(AnalysisConfig(history_size=3))
    hand = _series(_hand, [0.0] * 16)
    compensated = _series(_comp, [0.0] * 16)
    for i in range(5):
        classifier.classify(hand, hand, compensated, 300.0 + i)
    assert len(classifier.history) == 3
    assert [p.timestamp for p in classifier.history] == [302.0, 303.0, 304.0]


def test_classifier_reset(classifier):
    hand = _series(_hand, [0.0] * 16)
    classifier.classify(hand, hand, _series(_comp, [0.0] * 16), 300.0)
    classifier.reset()
    assert classifier.current is None
    assert len(classifier.history) == 0


def test_pattern_history_evicts_oldest():
    history = PatternHistory(capacity=2)
    for i in range(3):
        history.append(DetectedPattern(
            id=f"p{i}", name='x', confidence=0.8, timestamp=float(i),
            duration=0.0, kind=PatternKind.COMBINED,
        ))
    assert [p.id for p in history.to_list()] == ['p1', 'p2']
    assert history.latest().id == 'p2'
