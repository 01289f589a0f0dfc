import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from .errors import PolicyMisconfiguration
from .policy import DEFAULT_COOLDOWNS, DEFAULT_CYCLE_SECONDS, DEFAULT_THRESHOLDS, EscalationPolicy


@dataclass(frozen=True)
class GateConfig:
    """Process-wide settings, read once by create_app and never mutated."""

    database_url: str = 'sqlite:///clickgate.db'
    api_token: Optional[str] = None
    policy: EscalationPolicy = field(default_factory=EscalationPolicy)
    display_offset_hours: int = 0
    cors_whitelist: Tuple[str, ...] = ('http://localhost',)
    allowed_methods: Tuple[str, ...] = ('GET', 'POST')
    api_rate_limit_max: int = 500000
    api_rate_limit_window: int = 120
    store_timeout_seconds: int = 5
    store_max_retries: int = 5
    log_level: str = 'INFO'


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError:
        raise PolicyMisconfiguration(f'{name} must be an integer, got {raw!r}') from None


def _list(env: Mapping[str, str], name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = env.get(name)
    if raw is None:
        return default
    return tuple(item.strip() for item in raw.split(',') if item.strip())


def load_config(env: Optional[Mapping[str, str]] = None) -> GateConfig:
    """Build a GateConfig from environment variables.

    Cool-downs are given in minutes (FLOOD_1_TIMEOUT..FLOOD_5_TIMEOUT) and
    TIME_SYNC_GMT is the number of hours to subtract from UTC when rendering
    times. Raises PolicyMisconfiguration on malformed values.
    """
    env = os.environ if env is None else env

    thresholds = tuple(
        _int(env, f'FLOOD_{n}_LIMIT', DEFAULT_THRESHOLDS[n]) for n in range(len(DEFAULT_THRESHOLDS))
    )
    cooldowns = tuple(
        _int(env, f'FLOOD_{n}_TIMEOUT', DEFAULT_COOLDOWNS[n - 1] // 60) * 60
        for n in range(1, len(DEFAULT_COOLDOWNS) + 1)
    )
    policy = EscalationPolicy(
        thresholds=thresholds,
        cooldowns=cooldowns,
        cycle_seconds=_int(env, 'FLOOD_TIMEOUT_DEFAULT', DEFAULT_CYCLE_SECONDS),
        flood_intensity=_int(env, 'FLOOD_INTENSITY', 1),
    )

    retries = _int(env, 'STORE_MAX_RETRIES', 5)
    if retries < 1:
        raise PolicyMisconfiguration('STORE_MAX_RETRIES must be at least 1')

    return GateConfig(
        database_url=env.get('DATABASE_URL', 'sqlite:///clickgate.db'),
        api_token=env.get('TOKEN_KEY_API') or None,
        policy=policy,
        display_offset_hours=-_int(env, 'TIME_SYNC_GMT', 0),
        cors_whitelist=_list(env, 'CORS_WHITELIST', ('http://localhost',)),
        allowed_methods=tuple(m.upper() for m in _list(env, 'ALLOWED_METHODS', ('GET', 'POST'))),
        api_rate_limit_max=_int(env, 'API_RATE_LIMIT_MAX', 500000),
        api_rate_limit_window=_int(env, 'API_RATE_LIMIT_WINDOW', 120),
        store_timeout_seconds=_int(env, 'STORE_TIMEOUT_SECONDS', 5),
        store_max_retries=retries,
        log_level=env.get('LOG_LEVEL', 'INFO').upper(),
    )
