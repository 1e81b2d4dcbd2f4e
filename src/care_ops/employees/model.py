from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Domain entity: a staff member who can receive corrective actions."""

    employee_id: int
    first_name: str
    last_name: str
    position: Optional[str] = None
    hire_date: Optional[date] = None
    email: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def as_dict(self) -> dict:
        return {
            "id": self.employee_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "position": self.position,
            "hire_date": self.hire_date.isoformat() if self.hire_date else None,
        }
