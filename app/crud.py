import datetime
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Query

import database
import models


def create_record(
    user_id: str,
    group_id: Optional[str],
    user_name: str,
    poop_type: models.PoopType,
    record_date: datetime.datetime,
) -> models.PoopRecord:
    """Insert one poop record and return it (attributes stay loaded after commit)."""
    with database.session_scope() as db:
        entry = models.PoopRecord(
            group_id=group_id,
            user_id=user_id,
            user_name=user_name,
            record_date=record_date,
            poop_type=poop_type,
        )
        db.add(entry)
        db.flush()
        return entry


def _filtered(
    query: Query,
    group_id: Optional[str] = None,
    user_id: Optional[str] = None,
    start: Optional[datetime.datetime] = None,
    end: Optional[datetime.datetime] = None,
    exact_group: bool = False,
) -> Query:
    """Apply scope and half-open [start, end) date filters.

    With exact_group a missing group_id matches only one-to-one rows
    (group_id IS NULL); otherwise it leaves the group unfiltered.
    """
    record = models.PoopRecord
    if group_id is not None:
        query = query.filter(record.group_id == group_id)
    elif exact_group:
        query = query.filter(record.group_id.is_(None))
    if user_id is not None:
        query = query.filter(record.user_id == user_id)
    if start is not None:
        query = query.filter(record.record_date >= start)
    if end is not None:
        query = query.filter(record.record_date < end)
    return query


def count_records(
    group_id: Optional[str] = None,
    user_id: Optional[str] = None,
    start: Optional[datetime.datetime] = None,
    end: Optional[datetime.datetime] = None,
    exact_group: bool = False,
) -> int:
    with database.session_scope() as db:
        query = db.query(func.count(models.PoopRecord.id))
        query = _filtered(query, group_id, user_id, start, end, exact_group)
        return query.scalar() or 0


def count_by_type(
    group_id: Optional[str] = None,
    user_id: Optional[str] = None,
    start: Optional[datetime.datetime] = None,
    end: Optional[datetime.datetime] = None,
    exact_group: bool = False,
) -> Dict[models.PoopType, int]:
    """Return {poop_type: count} for the scope; categories without rows are absent."""
    record = models.PoopRecord
    with database.session_scope() as db:
        query = db.query(record.poop_type, func.count(record.id))
        query = _filtered(query, group_id, user_id, start, end, exact_group)
        rows = query.group_by(record.poop_type).all()
    return {models.PoopType(poop_type): count for poop_type, count in rows}


def count_by_user(
    group_id: str,
    start: Optional[datetime.datetime] = None,
    end: Optional[datetime.datetime] = None,
) -> List[Dict]:
    """Per-user, per-type counts inside a group and window.

    Each item carries the user's earliest record id in the window and the
    display name stored on that record.
    """
    record = models.PoopRecord
    with database.session_scope() as db:
        query = db.query(
            record.user_id,
            record.poop_type,
            func.count(record.id),
            func.min(record.id),
        )
        query = _filtered(query, group_id=group_id, start=start, end=end)
        rows = query.group_by(record.user_id, record.poop_type).all()

        users: Dict[str, Dict] = {}
        for user_id, poop_type, count, first_id in rows:
            item = users.setdefault(user_id, {"user_id": user_id, "counts": {}, "first_id": first_id})
            item["counts"][models.PoopType(poop_type)] = count
            item["first_id"] = min(item["first_id"], first_id)

        if not users:
            return []

        first_ids = [item["first_id"] for item in users.values()]
        names = dict(
            db.query(record.id, record.user_name).filter(record.id.in_(first_ids)).all()
        )

    for item in users.values():
        item["user_name"] = names.get(item["first_id"], "")
    return list(users.values())


def first_record_date(user_id: str, group_id: Optional[str] = None) -> Optional[datetime.datetime]:
    """Earliest record_date of a user, optionally restricted to one group."""
    with database.session_scope() as db:
        query = db.query(func.min(models.PoopRecord.record_date))
        query = _filtered(query, group_id=group_id, user_id=user_id)
        return query.scalar()
