from flask import Flask
from sqlalchemy import create_engine

from .extensions import init_db_session, Base
from .clock import Clock
from .config import GateConfig, load_config
from .engine import AdmissionEngine
from .rate_limiter import SimpleRateLimiter
from .service import ClickGate
from .store import SubjectRecordStore


def engine_options(config: GateConfig) -> dict:
    """create_engine kwargs bounding every store call by store_timeout_seconds.

    sqlite gets a busy timeout, PostgreSQL a server-side statement_timeout and
    MySQL driver read/write timeouts. Other backends only bound the wait for a
    pooled connection; a slow statement there is not interrupted.
    """
    timeout = config.store_timeout_seconds
    url = config.database_url
    kwargs = {'future': True}
    if url.startswith('sqlite'):
        # the connection is shared across request threads
        kwargs['connect_args'] = {'timeout': timeout, 'check_same_thread': False}
        return kwargs
    kwargs['pool_timeout'] = timeout
    kwargs['pool_pre_ping'] = True
    if url.startswith('postgresql'):
        kwargs['connect_args'] = {'options': f'-c statement_timeout={timeout * 1000}'}
    elif url.startswith('mysql'):
        kwargs['connect_args'] = {'read_timeout': timeout, 'write_timeout': timeout}
    return kwargs


def make_engine(config: GateConfig):
    return create_engine(config.database_url, **engine_options(config))


def create_app(config=None, clock=None):
    """Build the Flask app around a single ClickGate.

    config defaults to load_config() (environment); an invalid policy raises
    PolicyMisconfiguration here, before any request is served.
    """
    config = config or load_config()
    clock = clock or Clock(config.display_offset_hours)

    app = Flask(__name__)
    app.logger.setLevel(config.log_level)

    # initialize DB engine and session
    engine = make_engine(config)
    db_session = init_db_session(engine)

    # Attach session and engine to app for convenience
    app.db_engine = engine
    app.db_session = db_session
    app.gate_config = config
    app.gate_clock = clock
    app.request_limiter = SimpleRateLimiter()
    app.gate = ClickGate(
        AdmissionEngine(config.policy, clock),
        SubjectRecordStore(db_session),
        max_retries=config.store_max_retries,
    )

    @app.teardown_appcontext
    def remove_session(exc=None):
        db_session.remove()

    from .auth import auth_bp
    app.register_blueprint(auth_bp)
    from .clicks import clicks_bp
    app.register_blueprint(clicks_bp)

    app.logger.info('click gate ready: thresholds=%s cooldowns=%s intensity=%s',
                    config.policy.thresholds, config.policy.cooldowns, config.policy.flood_intensity)
    return app
