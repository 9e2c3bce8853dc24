"""
Admin notification feed.

Writes are fire-and-forget: a failure to record a notification is logged and
never fails the operation that triggered it.
"""

import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from landchain.core.exceptions import NotFoundError
from landchain.models.admin_notification import AdminNotification
from landchain.models.land_record import LandRecord

logger = logging.getLogger(__name__)

TRANSFER_REQUEST = "TransferRequest"


def record_transfer_requested(db: Session, record: LandRecord, from_owner: str, to_owner: str) -> bool:
    """Insert a TransferRequest notification. Returns False if the write failed."""
    try:
        notification = AdminNotification(
            type=TRANSFER_REQUEST,
            record_id=record.id,
            survey_number=record.survey_number,
            from_owner=from_owner,
            to_owner=to_owner,
            message=f"Transfer request for survey number {record.survey_number} is pending approval",
            read=False,
        )
        db.add(notification)
        db.commit()
        return True
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to write admin notification for record {record.id}: {e}")
        return False


def list_notifications(db: Session, unread_only: bool = False, limit: int = 50) -> List[AdminNotification]:
    query = db.query(AdminNotification)
    if unread_only:
        query = query.filter(AdminNotification.read.is_(False))
    return (
        query.order_by(AdminNotification.timestamp.desc(), AdminNotification.id.desc())
        .limit(limit)
        .all()
    )


def count_unread(db: Session) -> int:
    return db.query(AdminNotification).filter(AdminNotification.read.is_(False)).count()


def _get(db: Session, notification_id: int) -> AdminNotification:
    notification = db.query(AdminNotification).filter(AdminNotification.id == notification_id).first()
    if not notification:
        raise NotFoundError("Notification not found")
    return notification


def mark_read(db: Session, notification_id: int) -> AdminNotification:
    notification = _get(db, notification_id)
    notification.read = True
    db.commit()
    db.refresh(notification)
    return notification


def mark_all_read(db: Session) -> int:
    updated = (
        db.query(AdminNotification)
        .filter(AdminNotification.read.is_(False))
        .update({"read": True}, synchronize_session=False)
    )
    db.commit()
    return updated


def delete_notification(db: Session, notification_id: int) -> None:
    notification = _get(db, notification_id)
    db.delete(notification)
    db.commit()
