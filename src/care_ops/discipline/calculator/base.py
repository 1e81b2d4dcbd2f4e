from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from typing import Generic, Sequence, TypeVar

from ..model import DisciplineStats, PointRecord

R = TypeVar("R", bound=PointRecord)


@dataclass(frozen=True)
class RecordBuckets(Generic[R]):
    rolling: list[R]
    expired: list[R]
    voided: list[R]


class DisciplineCalculator(ABC):
    """Calculator interface (Strategy Pattern for discipline scoring)."""

    @abstractmethod
    def partition(self, records: Sequence[R], now: date | datetime) -> RecordBuckets[R]:
        raise NotImplementedError

    @abstractmethod
    def compute(self, records: Sequence[PointRecord], now: date | datetime) -> DisciplineStats:
        raise NotImplementedError
