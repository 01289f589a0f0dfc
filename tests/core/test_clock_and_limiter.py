from datetime import datetime

from clickgate.clock import Clock
from clickgate.rate_limiter import SimpleRateLimiter


def test_clock_formats_with_display_offset() -> None:
    ts = datetime(2026, 3, 1, 2, 5, 9)
    assert Clock().format_time(ts) == '02:05:09'
    assert Clock(display_offset_hours=-3).format_time(ts) == '23:05:09'
    assert Clock(display_offset_hours=-3).format_datetime(ts) == '28/02/2026 23:05:09'


def test_clock_now_is_naive_utc() -> None:
    clock = Clock()
    assert clock.now().tzinfo is None


def test_rate_limiter_window_slides() -> None:
    t = [100.0]
    rl = SimpleRateLimiter(clock=lambda: t[0])
    assert rl.allow('1.2.3.4', max_calls=2, period=60)
    assert rl.allow('1.2.3.4', max_calls=2, period=60)
    assert not rl.allow('1.2.3.4', max_calls=2, period=60)
    assert rl.allow('5.6.7.8', max_calls=2, period=60)
    t[0] += 61
    assert rl.allow('1.2.3.4', max_calls=2, period=60)


def test_rate_limiter_forgets_idle_keys() -> None:
    t = [100.0]
    rl = SimpleRateLimiter(clock=lambda: t[0])
    rl.allow('1.2.3.4', max_calls=5, period=60)
    rl.allow('5.6.7.8', max_calls=5, period=60)
    t[0] += 61
    assert rl.allow('9.9.9.9', max_calls=5, period=60)
    assert set(rl.calls) == {'9.9.9.9'}
