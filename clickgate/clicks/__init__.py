from flask import Blueprint, request, jsonify, current_app
import jsonschema

from ..auth import token_required
from ..decisions import DecisionKind
from ..errors import StorageError

clicks_bp = Blueprint('clicks', __name__)

CLICK_SCHEMA = {
    'type': 'object',
    'properties': {
        'userId': {'type': ['string', 'integer']},
    },
    'required': ['userId'],
}

STATUS_CODES = {
    DecisionKind.ALLOW: 200,
    DecisionKind.FLOOD_WARNING: 401,
    DecisionKind.BLOCKED: 401,
    DecisionKind.DENIED: 401,
}


def render_decision(decision):
    clock = current_app.gate_clock
    if decision.kind is DecisionKind.ERROR:
        status = 400 if decision.error_kind == 'validation' else 503
        body = {
            'status_msg': 'error',
            'status_msg_declaration': decision.declaration,
            'status_resp': decision.detail,
            'retryable': decision.error_kind == 'storage',
        }
        return jsonify(body), status

    resp = clock.format_time(decision.unlock_at)
    if decision.kind is DecisionKind.BLOCKED:
        resp = f'{decision.wait_label}/{resp}'
    body = {
        'status_msg': decision.kind.value,
        'status_msg_declaration': decision.declaration,
        'status_resp': resp,
    }
    return jsonify(body), STATUS_CODES[decision.kind]


def _subject_from_body():
    data = request.get_json(silent=True)
    try:
        jsonschema.validate(instance=data, schema=CLICK_SCHEMA)
    except jsonschema.ValidationError as ve:
        return None, (jsonify({
            'status_msg': 'error',
            'status_msg_declaration': 'validation-error',
            'status_resp': ve.message,
        }), 400)
    return data['userId'], None


@clicks_bp.route('/addClick', methods=['POST'])
@token_required
def add_click():
    subject_id, error = _subject_from_body()
    if error:
        return error
    return render_decision(current_app.gate.evaluate_click(subject_id))


@clicks_bp.route('/updateClick', methods=['POST'])
@token_required
def update_click():
    """Cooperative release: the caller finished the work the click admitted."""
    subject_id, error = _subject_from_body()
    if error:
        return error
    return render_decision(current_app.gate.finalize_click(subject_id))


@clicks_bp.route('/updateAdmClick', methods=['POST'])
@token_required
def update_adm_click():
    """Manual unblock from an operator; ignores any active penalty."""
    subject_id, error = _subject_from_body()
    if error:
        return error
    current_app.logger.info('administrative release', extra={'subject_id': subject_id, 'ip': request.remote_addr})
    return render_decision(current_app.gate.force_release(subject_id))


@clicks_bp.route('/listBlocked', methods=['GET'])
@token_required
def list_blocked():
    limit = request.args.get('limit', type=int)
    offset = request.args.get('offset', default=0, type=int)
    if (limit is not None and limit < 1) or offset < 0:
        return jsonify({'status_msg': 'fail!', 'resp': 'limit must be >= 1 and offset >= 0'}), 400
    try:
        subjects = current_app.gate.list_subjects(limit=limit, offset=offset)
    except StorageError as e:
        current_app.logger.exception('listBlocked: storage failure')
        return jsonify({'status_msg': 'fail!', 'resp': str(e)}), 503
    out = [s.to_dict() for s in subjects]
    return jsonify({'status_msg': 'success!', 'resp': out}), 200


@clicks_bp.route('/healthCheckApi', methods=['GET'])
def health_check():
    clock = current_app.gate_clock
    try:
        current_app.gate.store.ping()
    except StorageError as e:
        current_app.logger.exception('health check failed')
        return jsonify({'status_msg': 'error', 'status_resp': str(e)}), 503
    return jsonify({'status_msg': 'health', 'status_resp': clock.format_datetime(clock.now()) + ' UTC'}), 200
