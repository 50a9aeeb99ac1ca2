"""
Notification Store

Tracks, per (session, event) pair, whether a pre-meeting SMS is due or
already sent:

    Unseen -> PendingInWindow -> Sent

A record is created the first time a future meeting is seen. The send
decision is positive only while the meeting starts within the send window
and nothing was sent yet; Sent is terminal.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

import pytz

from skybrief.constants import NOTIFICATION_SETTINGS
from skybrief.db.persistence import InMemoryStore, KeyValueStore
from skybrief.notifications.dto import NotificationRecord, notification_key

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(pytz.UTC)


class NotificationStore:
    """
    Args:
        store: Backing key-value store for NotificationRecord values
        send_window_minutes: How long before a meeting a notification may go out
        retention_hours: How long sent records are kept
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        send_window_minutes: int = NOTIFICATION_SETTINGS.SEND_WINDOW_MINUTES,
        retention_hours: int = NOTIFICATION_SETTINGS.SENT_RECORD_RETENTION_HOURS,
    ):
        self.store = store if store is not None else InMemoryStore()
        self.send_window_minutes = send_window_minutes
        self.retention_hours = retention_hours

    def get_record(self, session_id: str, event_id: str) -> Optional[NotificationRecord]:
        return self.store.get(notification_key(session_id, event_id))

    def schedule_notification(self, record: NotificationRecord) -> None:
        self.store.set(record.key, record)

    def mark_as_sent(self, session_id: str, event_id: str, now: Optional[datetime] = None) -> bool:
        """Stamp ``sent_at``; False when the pair was never scheduled."""
        record = self.get_record(session_id, event_id)
        if record is None:
            logger.warning(f"Cannot mark unknown notification {notification_key(session_id, event_id)} as sent")
            return False
        record.sent_at = now or _utc_now()
        self.store.set(record.key, record)
        return True

    def has_notification_been_sent(self, session_id: str, event_id: str) -> bool:
        record = self.get_record(session_id, event_id)
        return record is not None and record.sent_at is not None

    def should_send_notification(
        self,
        session_id: str,
        event_id: str,
        meeting_start: datetime,
        now: Optional[datetime] = None,
        send_window_minutes: Optional[int] = None,
    ) -> bool:
        """
        Decide whether the pre-meeting SMS for this pair should go out now.

        Args:
            session_id: User session
            event_id: Calendar event id
            meeting_start: Aware meeting start time
            now: Current time (defaults to UTC now)
            send_window_minutes: Per-user override of the store's send window

        Returns:
            True only when the meeting starts within the send window (0 to
            ``send_window_minutes`` minutes, inclusive) and no SMS was sent
        """
        now = now or _utc_now()
        if send_window_minutes is None:
            send_window_minutes = self.send_window_minutes
        minutes_until = (meeting_start - now).total_seconds() / 60
        record = self.get_record(session_id, event_id)

        if record is None:
            if minutes_until < 0:
                return False
            record = NotificationRecord(session_id=session_id, event_id=event_id, scheduled_for=meeting_start)
            self.schedule_notification(record)

        if record.sent_at is not None:
            return False

        return 0 <= minutes_until <= send_window_minutes

    def get_pending_notifications(self, now: Optional[datetime] = None) -> List[NotificationRecord]:
        """Unsent records whose meeting has already started."""
        now = now or _utc_now()
        return [
            record for record in self.store.values()
            if record.sent_at is None and record.scheduled_for <= now
        ]

    def cleanup_old_notifications(self, now: Optional[datetime] = None) -> int:
        """Drop records sent more than ``retention_hours`` ago; returns how many were removed."""
        cutoff = (now or _utc_now()) - timedelta(hours=self.retention_hours)
        stale = [
            key for key, record in self.store.items()
            if record.sent_at is not None and record.sent_at < cutoff
        ]
        for key in stale:
            self.store.delete(key)
        if stale:
            logger.info(f"Removed {len(stale)} sent notification records")
        return len(stale)
