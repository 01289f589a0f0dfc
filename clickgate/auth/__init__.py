from functools import wraps
import hmac

from flask import Blueprint, request, jsonify, current_app

auth_bp = Blueprint('auth', __name__)


def denied(declaration: str, message: str, status: int = 401):
    return jsonify({
        'status_msg': 'denied',
        'status_msg_declaration': declaration,
        'status_resp': message,
    }), status


@auth_bp.before_app_request
def _allow_methods():
    allowed = current_app.gate_config.allowed_methods
    if request.method.upper() not in allowed:
        return denied('method-not-allowed', f'Method [ {request.method} ] not allowed')


@auth_bp.before_app_request
def _ensure_rate_limit():
    # coarse per-ip guard against request floods, applied to every route
    cfg = current_app.gate_config
    ip = request.remote_addr or 'unknown'
    if not current_app.request_limiter.allow(ip, cfg.api_rate_limit_max, cfg.api_rate_limit_window):
        current_app.logger.warning('request flood from %s', ip)
        return jsonify({
            'status_msg': 'blocked',
            'status_msg_declaration': 'to-many-requests',
            'status_resp': 'Too many requests, try again in a few minutes!',
        }), 429


@auth_bp.after_app_request
def _cors(response):
    origin = request.headers.get('Origin')
    if origin and origin in current_app.gate_config.cors_whitelist:
        response.headers['Access-Control-Allow-Origin'] = origin
        response.headers['Vary'] = 'Origin'
    return response


def token_required(view):
    """Reject the request unless it carries the API token and a JSON content type."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        token = request.headers.get('Authorization')
        if not token:
            return denied('no-token-provided', 'No token provided!')
        if request.mimetype != 'application/json':
            return denied('content-type-not-allowed', 'Content Type not allowed!')
        expected = current_app.gate_config.api_token
        if not expected:
            current_app.logger.error('TOKEN_KEY_API is not configured; rejecting request')
            return denied('invalid-token', 'Invalid token!')
        if not hmac.compare_digest(token.encode(), expected.encode()):
            current_app.logger.warning('invalid token', extra={'path': request.path, 'ip': request.remote_addr})
            return denied('invalid-token', 'Invalid token!')
        return view(*args, **kwargs)

    return wrapper
