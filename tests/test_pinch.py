import random

import pytest

from gesture_chess.core.pinch import PinchDetector, pinch_distance

ORIGIN = (0.0, 0.0, 0.0)


def at_distance(d):
    return (d, 0.0, 0.0)


def test_distance_with_and_without_depth():
    thumb = (0.0, 0.0, 0.0)
    index = (0.03, 0.04, 0.12)
    assert pinch_distance(thumb, index, use_depth=False) == pytest.approx(0.05)
    assert pinch_distance(thumb, index, use_depth=True) == pytest.approx(0.13)


def test_depth_makes_detection_stricter():
    thumb = (0.5, 0.5, 0.0)
    index = (0.51, 0.5, 0.1)
    assert PinchDetector(threshold=0.06, use_depth=False).update(thumb, index, 0) is True
    assert PinchDetector(threshold=0.06, use_depth=True).update(thumb, index, 0) is False


def test_threshold_is_strict():
    detector = PinchDetector(threshold=0.5, cooldown_ms=0)
    assert detector.update(ORIGIN, at_distance(0.5), 0) is False
    assert detector.update(ORIGIN, at_distance(0.49), 10) is True


def test_distance_sequence_changes_once_within_cooldown():
    detector = PinchDetector(threshold=0.08, cooldown_ms=100, use_depth=False)
    distances = [0.10, 0.09, 0.05, 0.05, 0.09]
    exposed = [detector.update(ORIGIN, at_distance(d), i * 20) for i, d in enumerate(distances)]

    assert exposed == [False, False, True, True, True]
    changes = [i for i in range(1, len(exposed)) if exposed[i] != exposed[i - 1]]
    assert changes == [2]   # t=40ms, the first sample below the threshold

    # once the window has passed the release goes through
    assert detector.update(ORIGIN, at_distance(0.09), 140) is False


def test_first_change_is_not_delayed():
    detector = PinchDetector(threshold=0.06, cooldown_ms=400)
    assert detector.update(ORIGIN, at_distance(0.01), 5) is True


def test_exposed_value_changes_at_most_once_per_window():
    rng = random.Random(7)
    cooldown = 150
    detector = PinchDetector(threshold=0.06, cooldown_ms=cooldown)

    now = 0.0
    last_value = detector.is_pinching
    change_times = []
    for _ in range(500):
        now += rng.uniform(5, cooldown - 1)
        raw = rng.random() < 0.5
        value = detector.update_raw(raw, now)
        if value != last_value:
            change_times.append(now)
            last_value = value

    assert len(change_times) > 5
    gaps = [b - a for a, b in zip(change_times, change_times[1:])]
    assert all(gap >= cooldown for gap in gaps)


def test_last_distance_and_reset():
    detector = PinchDetector(threshold=0.06, cooldown_ms=100)
    detector.update(ORIGIN, at_distance(0.02), 0)
    assert detector.is_pinching
    assert detector.last_distance == pytest.approx(0.02)

    detector.reset()
    assert not detector.is_pinching
    assert detector.last_distance is None
    # no cooldown carried over from before the reset
    assert detector.update(ORIGIN, at_distance(0.02), 10) is True
