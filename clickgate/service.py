import logging
from typing import List, Optional

from .decisions import Decision, DecisionKind
from .engine import AdmissionEngine
from .errors import StorageError, ValidationError
from .records import SubjectState
from .store import SubjectRecordStore

logger = logging.getLogger(__name__)

MAX_SUBJECT_ID_LENGTH = 255


def normalize_subject_id(subject_id) -> str:
    # bool is an int subclass but never a valid id
    if isinstance(subject_id, bool) or not isinstance(subject_id, (str, int)):
        raise ValidationError('userId must be a string or integer')
    value = str(subject_id)
    if not value.strip():
        raise ValidationError('userId required')
    if len(value) > MAX_SUBJECT_ID_LENGTH:
        raise ValidationError(f'userId longer than {MAX_SUBJECT_ID_LENGTH} characters')
    return value


class ClickGate:
    """Entry point used by the transport: one call per inbound event.

    Each call reads the subject's record, lets the engine compute the full
    next record, then commits it with a single conditional write. A lost
    race re-runs the whole read/evaluate/write cycle, at most max_retries
    times.
    """

    def __init__(self, engine: AdmissionEngine, store: SubjectRecordStore, max_retries: int = 5):
        self.engine = engine
        self.store = store
        self.max_retries = max_retries

    def evaluate_click(self, subject_id) -> Decision:
        return self._run('evaluate', subject_id, self.engine.evaluate)

    def finalize_click(self, subject_id) -> Decision:
        return self._run('finalize', subject_id, lambda sid, cur: self.engine.finalize(cur))

    def force_release(self, subject_id) -> Decision:
        return self._run('force_release', subject_id, lambda sid, cur: self.engine.force_release(cur))

    def list_subjects(self, limit: Optional[int] = None, offset: int = 0) -> List[SubjectState]:
        return self.store.list_all(limit=limit, offset=offset)

    def _run(self, op, subject_id, step) -> Decision:
        try:
            sid = normalize_subject_id(subject_id)
        except ValidationError as e:
            logger.warning('%s: rejected subject id %r: %s', op, subject_id, e)
            return Decision.error('validation', str(e))

        try:
            decision = self._commit(op, sid, step)
        except StorageError as e:
            logger.exception('%s: storage failure for subject %s', op, sid)
            return Decision.error('storage', str(e))

        if decision.kind is DecisionKind.BLOCKED:
            logger.info('%s: subject %s blocked at tier %s until %s', op, sid, decision.tier, decision.unlock_at)
        else:
            logger.debug('%s: subject %s -> %s', op, sid, decision.declaration)
        return decision

    def _commit(self, op, sid, step) -> Decision:
        for attempt in range(1, self.max_retries + 1):
            current = self.store.get(sid)
            transition = step(sid, current)
            if not transition.writes:
                return transition.decision
            if current is None:
                ok = self.store.create(transition.state)
            else:
                ok = self.store.replace(transition.state)
            if ok:
                return transition.decision
            logger.warning('%s: write conflict for subject %s (attempt %d/%d)', op, sid, attempt, self.max_retries)
        raise StorageError(f'write conflict for {sid} after {self.max_retries} attempts')
