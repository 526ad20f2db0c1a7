from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, Optional, Tuple


class Category(str, Enum):
    FOOD = "Food"
    TRAVEL = "Travel"
    FUN = "Fun"
    STUDY = "Study"
    OTHER = "Other"


class PaymentMode(str, Enum):
    CASH = "Cash"
    UPI = "UPI"


@dataclass(frozen=True)
class ExpenseRecord:
    id: int
    amount: int                  # paise, always > 0
    description: str
    category: Category
    payment_mode: PaymentMode
    date: datetime               # naive local time
    notes: Optional[str] = None


# validated input for the store; id is assigned on insert
@dataclass(frozen=True)
class NewExpense:
    amount: int
    description: str
    category: Category
    payment_mode: PaymentMode
    date: Optional[datetime] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class PeriodTotal:
    total: int
    percent_change: int


@dataclass(frozen=True)
class WeekTotal:
    total: int
    percent_change: int
    category_distribution: Dict[Category, int]
    payment_distribution: Dict[PaymentMode, int]


@dataclass(frozen=True)
class DailyPoint:
    date: date
    total: int


@dataclass(frozen=True)
class Summary:
    today: PeriodTotal
    week: WeekTotal
    month: PeriodTotal
    daily_totals: Tuple[DailyPoint, ...]


@dataclass(frozen=True)
class HighestExpense:
    amount: int
    description: str
    date: Optional[datetime] = None
    id: Optional[int] = None

    @classmethod
    def of(cls, record: ExpenseRecord) -> "HighestExpense":
        return cls(amount=record.amount, description=record.description, date=record.date, id=record.id)


NO_HIGHEST_EXPENSE = HighestExpense(amount=0, description="N/A")


@dataclass(frozen=True)
class PeriodStats:
    total_spending: int
    average_daily: int
    highest_expense: HighestExpense
    category_distribution: Dict[Category, int]
    payment_distribution: Dict[PaymentMode, int]
    top_expenses: Tuple[ExpenseRecord, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Page:
    items: Tuple[ExpenseRecord, ...]
    page: int
    page_size: int
    total_count: int
    total_pages: int
