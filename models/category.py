"""
models/category.py
------------------
Reference data: transaction categories. Seeded once, never edited by flows.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Category:
    name: str
    type: str  # 'income' | 'expense'
    icon: Optional[str] = None
    color: Optional[str] = None
    is_active: bool = True
    id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "icon": self.icon,
            "color": self.color,
            "isActive": self.is_active,
        }
