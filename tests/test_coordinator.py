"""
Coordination primitive tests
Monotonic clock and rolling sample windows
"""

import threading

import pytest

from motion_fusion.coordinator import MonotonicClock, MotionWindow


def test_clock_strictly_increasing():
    clock = MonotonicClock()
    readings = [clock.now() for _ in range(1000)]
    assert all(b > a for a, b in zip(readings, readings[1:]))
    assert clock.get_stats()['total_calls'] == 1000


def test_clock_thread_safe():
    clock = MonotonicClock()
    readings = []
    lock = threading.Lock()

    def worker():
        local = [clock.now() for _ in range(200)]
        with lock:
            readings.extend(local)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(set(readings)) == 800


def test_clock_reset():
    clock = MonotonicClock()
    clock.now()
    clock.reset()
    assert clock.get_stats() == {'total_calls': 0, 'last_reading': None}


def test_window_evicts_oldest():
    window = MotionWindow(3)
    for i in range(5):
        window.push(i)
    assert window.snapshot() == [2, 3, 4]
    assert window.latest() == 4
    assert len(window) == 3


def test_window_snapshot_is_a_copy():
    window = MotionWindow(3)
    window.push(1)
    snapshot = window.snapshot()
    snapshot.append(99)
    assert window.snapshot() == [1]


def test_window_clear():
    window = MotionWindow(2)
    window.push('a')
    window.clear()
    assert len(window) == 0
    assert window.latest() is None


def test_window_rejects_zero_capacity():
    with pytest.raises(ValueError):
        MotionWindow(0)
