from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional


class ClickStatus(str, Enum):
    ACTIVE = 'active'
    IDLE = 'idle'


@dataclass(frozen=True)
class SubjectState:
    """Detached snapshot of one subject's record.

    version is the optimistic concurrency token of the row the snapshot was
    read from; 0 means the row does not exist yet.
    """

    subject_id: str
    click_count: int
    status: ClickStatus
    block_level: Optional[int]
    created_at: datetime
    expires_at: datetime
    updated_at: Optional[datetime] = None
    version: int = 0

    def evolve(self, **changes) -> 'SubjectState':
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            'userId': self.subject_id,
            'clicks': self.click_count,
            'status': self.status.value,
            'blockLevel': self.block_level,
            'createdAt': self.created_at.isoformat(),
            'expiredAt': self.expires_at.isoformat(),
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }
