"""
Admin API routes.

Notification feed for transfer requests and registry-wide counters for the
admin dashboard.
"""

import logging
from typing import Optional, List
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from landchain.core.config import settings
from landchain.core.database import get_db
from landchain.services import notifications, transfers

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


class NotificationResponse(BaseModel):
    id: int
    type: str
    record_id: Optional[int]
    survey_number: Optional[str]
    from_owner: Optional[str]
    to_owner: Optional[str]
    message: str
    read: bool
    timestamp: Optional[datetime]

    class Config:
        from_attributes = True


class NotificationListResponse(BaseModel):
    success: bool = True
    unread: int
    notifications: List[NotificationResponse]


@router.get("/notifications/", response_model=NotificationListResponse)
def list_notifications(
    unread_only: bool = False,
    limit: Optional[int] = Query(None, ge=1, le=200),
    db: Session = Depends(get_db),
):
    """Admin notifications, most recent first."""
    rows = notifications.list_notifications(
        db, unread_only=unread_only, limit=limit or settings.NOTIFICATION_PAGE_SIZE
    )
    return NotificationListResponse(unread=notifications.count_unread(db), notifications=rows)


@router.post("/notifications/read-all")
def mark_all_notifications_read(db: Session = Depends(get_db)):
    updated = notifications.mark_all_read(db)
    logger.info(f"Marked {updated} notifications as read")
    return {"success": True, "updated": updated}


@router.post("/notifications/{notification_id}/read", response_model=NotificationResponse)
def mark_notification_read(notification_id: int, db: Session = Depends(get_db)):
    return notifications.mark_read(db, notification_id)


@router.delete("/notifications/{notification_id}")
def delete_notification(notification_id: int, db: Session = Depends(get_db)):
    notifications.delete_notification(db, notification_id)
    return {"success": True, "message": "Notification deleted"}


@router.get("/stats")
def registry_stats(db: Session = Depends(get_db)):
    """Record counts per status and unread notification count."""
    return transfers.registry_stats(db)
