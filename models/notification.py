"""
models/notification.py
----------------------
An in-app notification kept in the process-local history.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Notification:
    id: str
    title: str
    created_at: datetime
    message: Optional[str] = None
    kind: str = "info"  # 'info' | 'reminder' | 'test'

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "message": self.message,
            "type": self.kind,
            "createdAt": self.created_at,
        }
