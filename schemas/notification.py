from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class NotificationResponse(BaseModel):
    id: str
    user_id: str
    message: str
    related_entity: Optional[str] = None
    related_entity_id: Optional[str] = None
    is_read: bool = False
    requires_approval: bool = False
    last_reminder_sent: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
