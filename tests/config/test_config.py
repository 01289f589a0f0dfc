import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import scoped_session

from clickgate import create_app, engine_options
from clickgate.config import GateConfig, load_config
from clickgate.extensions import init_db_session
from clickgate.errors import PolicyMisconfiguration


def test_defaults() -> None:
    cfg = load_config({})
    assert cfg.policy.thresholds == (3, 7, 10, 15, 20, 25)
    assert cfg.policy.cooldowns == (60, 180, 600, 900, 1800)
    assert cfg.policy.cycle_seconds == 10
    assert cfg.policy.flood_intensity == 1
    assert cfg.api_token is None
    assert cfg.display_offset_hours == 0
    assert cfg.allowed_methods == ('GET', 'POST')


def test_environment_overrides() -> None:
    cfg = load_config({
        'FLOOD_0_LIMIT': '2',
        'FLOOD_5_LIMIT': '40',
        'FLOOD_1_TIMEOUT': '2',
        'FLOOD_TIMEOUT_DEFAULT': '30',
        'FLOOD_INTENSITY': '2',
        'TIME_SYNC_GMT': '3',
        'TOKEN_KEY_API': 'abc',
        'CORS_WHITELIST': 'http://a.test, http://b.test',
        'ALLOWED_METHODS': 'get,post,head',
    })
    assert cfg.policy.thresholds == (2, 7, 10, 15, 20, 40)
    assert cfg.policy.cooldowns[0] == 120
    assert cfg.policy.cycle_seconds == 30
    assert cfg.policy.flood_intensity == 2
    assert cfg.display_offset_hours == -3
    assert cfg.api_token == 'abc'
    assert cfg.cors_whitelist == ('http://a.test', 'http://b.test')
    assert cfg.allowed_methods == ('GET', 'POST', 'HEAD')


@pytest.mark.parametrize('env', [
    {'FLOOD_2_LIMIT': 'ten'},
    {'FLOOD_2_LIMIT': '5'},
    {'FLOOD_INTENSITY': '3'},
    {'FLOOD_3_TIMEOUT': '0'},
    {'STORE_MAX_RETRIES': '0'},
])
def test_bad_values_fail_at_load(env) -> None:
    with pytest.raises(PolicyMisconfiguration):
        load_config(env)


def test_create_app_fails_fast_on_bad_policy(monkeypatch) -> None:
    monkeypatch.setenv('FLOOD_1_LIMIT', '1')
    with pytest.raises(PolicyMisconfiguration):
        create_app()


@pytest.mark.parametrize('url,connect_args', [
    ('sqlite:///gate.db', {'timeout': 7, 'check_same_thread': False}),
    ('postgresql://db/gate', {'options': '-c statement_timeout=7000'}),
    ('mysql+pymysql://db/gate', {'read_timeout': 7, 'write_timeout': 7}),
])
def test_engine_options_bound_store_calls(url, connect_args) -> None:
    opts = engine_options(GateConfig(database_url=url, store_timeout_seconds=7))
    assert opts['connect_args'] == connect_args
    if not url.startswith('sqlite'):
        assert opts['pool_timeout'] == 7


def test_init_db_session_returns_registry(tmp_path) -> None:
    registry = init_db_session(create_engine(f"sqlite:///{tmp_path / 'x.db'}", future=True))
    assert isinstance(registry, scoped_session)
    assert registry() is registry()
    registry.remove()
