import datetime
import enum

from sqlalchemy import Column, DateTime, Enum, Index, Integer, String
from database import Base


class PoopType(enum.IntEnum):
    """Fixed set of categories a record can carry."""

    GOOD = 1
    STUCK = 2
    BAD = 3

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    PoopType.GOOD: "smooth",
    PoopType.STUCK: "constipated",
    PoopType.BAD: "diarrhea",
}


class PoopRecord(Base):
    """One accepted record command from a user, optionally scoped to a group.

    Rows are written once and never updated; group_id is NULL for one-to-one chats.
    """
    __tablename__ = "poop_records"
    __table_args__ = (
        Index("ix_poop_records_user_id_record_date", "user_id", "record_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    group_id = Column(String, nullable=True)
    user_id = Column(String, nullable=False)
    user_name = Column(String, nullable=False)
    record_date = Column(DateTime, default=datetime.datetime.now, nullable=False)
    poop_type = Column(Enum(PoopType, name="poop_type"), default=PoopType.GOOD, nullable=False)
    created_at = Column(DateTime, default=datetime.datetime.now, nullable=False)

    def __repr__(self):
        return (f"<PoopRecord(id={self.id}, group_id={self.group_id}, user_id={self.user_id}, "
                f"poop_type={self.poop_type}, record_date={self.record_date})>")
