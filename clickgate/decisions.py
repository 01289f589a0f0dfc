from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class DecisionKind(str, Enum):
    ALLOW = 'allow'
    FLOOD_WARNING = 'flood'
    BLOCKED = 'blocked'
    DENIED = 'denied'
    ERROR = 'error'


@dataclass(frozen=True)
class Decision:
    """Outcome of a gate operation, rendered by the transport."""

    kind: DecisionKind
    declaration: str
    unlock_at: Optional[datetime] = None
    tier: Optional[int] = None
    wait_seconds: Optional[int] = None
    wait_label: Optional[str] = None
    error_kind: Optional[str] = None
    detail: Optional[str] = None

    @classmethod
    def allow(cls, unlock_at, declaration='click-allow'):
        return cls(DecisionKind.ALLOW, declaration, unlock_at=unlock_at)

    @classmethod
    def flood_warning(cls, unlock_at):
        return cls(DecisionKind.FLOOD_WARNING, 'click-flood-warning', unlock_at=unlock_at)

    @classmethod
    def denied(cls, unlock_at):
        return cls(DecisionKind.DENIED, 'click-denied', unlock_at=unlock_at)

    @classmethod
    def blocked(cls, tier, wait_seconds, wait_label, unlock_at, declaration=None):
        return cls(
            DecisionKind.BLOCKED,
            declaration or f'click-flood-block-{tier}',
            unlock_at=unlock_at,
            tier=tier,
            wait_seconds=wait_seconds,
            wait_label=wait_label,
        )

    @classmethod
    def error(cls, error_kind, detail=None):
        return cls(DecisionKind.ERROR, f'click-{error_kind}-error', error_kind=error_kind, detail=detail)
