import threading
from datetime import datetime
from typing import List, Dict, Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from employee_server.models.users_model import User

# users belongs to the login server; everything here is read-only.

USER_COLUMNS = (User.username, User.email, User.profile_image)


def _rows(result) -> List[Dict[str, Any]]:
    return [dict(r) for r in result.mappings().all()]


def get_all_users(db: Session) -> List[Dict[str, Any]]:
    """Every user, most recently created first."""
    return _rows(db.execute(select(*USER_COLUMNS).order_by(User.id.desc())))


def get_users_created_after(db: Session, since: datetime, until: datetime) -> List[Dict[str, Any]]:
    """Users with since < created_at <= until, oldest id first."""
    stmt = (
        select(*USER_COLUMNS)
        .where(User.created_at > since, User.created_at <= until)
        .order_by(User.id)
    )
    return _rows(db.execute(stmt))


class NewUsersWatermark:
    """
    High-water mark for the new-users poll.

    Starts at construction time (process start) and lives in memory only, so
    a restart resets it. Each poll reads the users created in the window
    (mark, now] and then moves the mark to now, under a lock. Consecutive
    windows touch without overlapping: a row stamped after now waits for the
    next poll instead of being reported twice.
    """

    def __init__(self, start: Optional[datetime] = None, clock=datetime.now):
        self._clock = clock
        self._last_checked = start if start is not None else clock()
        self._lock = threading.Lock()

    @property
    def last_checked(self) -> datetime:
        return self._last_checked

    def poll(self, db: Session) -> List[Dict[str, Any]]:
        with self._lock:
            checked_at = self._clock()
            users = get_users_created_after(db, self._last_checked, checked_at)
            # only advance once the read succeeded
            self._last_checked = checked_at
            return users


new_users_watermark = NewUsersWatermark()
