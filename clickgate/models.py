from sqlalchemy import Column, Integer, String, DateTime
from datetime import datetime, timezone
from .extensions import Base
from .records import ClickStatus, SubjectState


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SubjectRecord(Base):
    __tablename__ = 'click_subjects'

    subject_id = Column(String(255), primary_key=True)
    click_count = Column(Integer, nullable=False, default=0)
    status = Column(String(16), nullable=False, default=ClickStatus.ACTIVE.value)
    block_level = Column(Integer, nullable=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow)
    expires_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=True)
    # bumped on every write; guards read-modify-write against lost updates
    version = Column(Integer, nullable=False, default=1)

    def to_state(self) -> SubjectState:
        return SubjectState(
            subject_id=self.subject_id,
            click_count=self.click_count,
            status=ClickStatus(self.status),
            block_level=self.block_level,
            created_at=self.created_at,
            expires_at=self.expires_at,
            updated_at=self.updated_at,
            version=self.version,
        )

    def __repr__(self):
        return f"<SubjectRecord {self.subject_id} clicks={self.click_count} level={self.block_level} status={self.status}>"
