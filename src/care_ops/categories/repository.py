from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import SeverityLevel
from .model import DisciplineThreshold, ViolationCategory


class CategoryRepository(Protocol):
    """Violation categories and the threshold policy rows."""

    def list_active(self) -> Sequence[ViolationCategory]:
        raise NotImplementedError

    def get_by_id(self, category_id: int) -> Optional[ViolationCategory]:
        raise NotImplementedError

    def create(
        self,
        *,
        category_name: str,
        severity_level: SeverityLevel,
        default_points: int,
        description: Optional[str],
        display_order: int,
    ) -> int:
        raise NotImplementedError

    def update(self, category: ViolationCategory) -> bool:
        raise NotImplementedError

    def is_referenced(self, category_id: int) -> bool:
        """True when at least one corrective action uses the category."""

        raise NotImplementedError

    def deactivate(self, category_id: int) -> bool:
        raise NotImplementedError

    def delete(self, category_id: int) -> bool:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def bulk_create(self, categories: Sequence[dict]) -> int:
        raise NotImplementedError

    # Thresholds
    def list_thresholds(self, *, active_only: bool = True) -> Sequence[DisciplineThreshold]:
        raise NotImplementedError

    def get_threshold(self, threshold_id: int) -> Optional[DisciplineThreshold]:
        raise NotImplementedError

    def update_threshold(self, threshold: DisciplineThreshold) -> bool:
        raise NotImplementedError

    def count_thresholds(self) -> int:
        raise NotImplementedError

    def bulk_create_thresholds(self, thresholds: Sequence[tuple[int, int, str, str]]) -> int:
        raise NotImplementedError
