"""
Admin Notification model.

Feed of events an administrator needs to act on (currently transfer
requests). record_id is a plain reference, not a foreign key.
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean
from sqlalchemy.sql import func

from landchain.core.database import Base


class AdminNotification(Base):
    __tablename__ = "admin_notifications"

    id = Column(Integer, primary_key=True, index=True)

    type = Column(String(50), nullable=False, index=True)  # "TransferRequest"
    record_id = Column(Integer, index=True)
    survey_number = Column(String(100))
    from_owner = Column(String(64))
    to_owner = Column(String(64))
    message = Column(Text, nullable=False)

    read = Column(Boolean, nullable=False, default=False, index=True)
    timestamp = Column(DateTime, server_default=func.now(), index=True)

    def __repr__(self):
        return f"<AdminNotification {self.id}: {self.type} for record {self.record_id}>"
