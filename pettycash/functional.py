import math
from abc import ABC, abstractmethod
from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Callable, Generic, Iterable, Mapping, Optional, TypeVar

from pettycash.domain import Category, ExpenseRecord, NewExpense, PaymentMode

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Nothing()

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return Nothing()

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    @abstractmethod
    def get_error(self) -> E:
        pass

    def is_left(self) -> bool:
        return not self.is_right()


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self._value))

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Left(self._error)

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return Left(self._error)

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def compose(*funcs):
    """Return a function that's the composition of the given functions.

    compose(f, g, h)(x) == f(g(h(x)))
    """
    def _composed(x):
        res = x
        for f in reversed(funcs):
            res = f(res)
        return res
    return _composed


def pipe(x, *funcs):
    """Pipe a value through a series of functions.

    pipe(x, f, g, h) == h(g(f(x)))
    """
    res = x
    for f in funcs:
        res = f(res)
    return res


def safe_record(records: Iterable[ExpenseRecord], record_id: int) -> Maybe[ExpenseRecord]:
    for r in records:
        if r.id == record_id:
            return Some(r)
    return Nothing()


def _invalid_amount(value: Any) -> Left:
    return Left({
        "error": "invalid_amount",
        "message": f"Amount must be a number, got {value!r}",
        "amount": value,
    })


def to_paise(value: Any) -> Either[dict, int]:
    """Convert a user supplied amount to integer paise.

    Integral values are already paise and pass through unchanged. Fractional
    values are rupees and become round(value * 100), halves rounding up.
    """
    if isinstance(value, bool) or value is None:
        return _invalid_amount(value)
    if isinstance(value, str):
        text = value.strip()
        try:
            value = int(text)
        except ValueError:
            try:
                value = Decimal(text)
            except InvalidOperation:
                return _invalid_amount(text)
    if isinstance(value, int):
        return Right(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return _invalid_amount(value)
        if value.is_integer():
            return Right(int(value))
        return Right(math.floor(value * 100 + 0.5))
    if isinstance(value, Decimal):
        if not value.is_finite():
            return _invalid_amount(value)
        if value == value.to_integral_value():
            return Right(int(value))
        return Right(int((value * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP)))
    return _invalid_amount(value)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Normalise a timestamp to naive local time; None when unparseable."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def _field(payload: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        if name in payload and payload[name] is not None:
            return payload[name]
    return None


def validate_expense(payload: Mapping[str, Any]) -> Either[dict, NewExpense]:
    """Check a create payload and turn it into a NewExpense.

    Accepts ``paymentMode`` or ``payment_mode``. ``notes`` and ``date`` are
    optional; the store fills in a missing date.
    """
    raw_amount = _field(payload, "amount")
    if raw_amount is None:
        return Left({
            "error": "missing_field",
            "message": "Amount is required",
            "field": "amount",
        })

    amount = to_paise(raw_amount)
    if amount.is_left():
        return amount
    paise = amount.get_or_else(0)
    if paise <= 0:
        return Left({
            "error": "non_positive_amount",
            "message": "Amount must be greater than 0",
            "amount": raw_amount,
        })

    description = _field(payload, "description")
    if not isinstance(description, str) or not description.strip():
        return Left({
            "error": "missing_description",
            "message": "Description is required",
            "field": "description",
        })

    raw_category = _field(payload, "category")
    try:
        category = Category(raw_category)
    except ValueError:
        return Left({
            "error": "invalid_category",
            "message": "Please select a valid category",
            "category": raw_category,
        })

    raw_mode = _field(payload, "paymentMode", "payment_mode")
    try:
        payment_mode = PaymentMode(raw_mode)
    except ValueError:
        return Left({
            "error": "invalid_payment_mode",
            "message": "Please select a valid payment mode",
            "payment_mode": raw_mode,
        })

    notes = _field(payload, "notes")
    if notes is not None and not isinstance(notes, str):
        return Left({
            "error": "invalid_notes",
            "message": "Notes must be text",
            "notes": notes,
        })

    if notes is not None:
        notes = notes.strip() or None

    raw_date = _field(payload, "date")
    when = None
    if raw_date is not None:
        when = parse_timestamp(raw_date)
        if when is None:
            return Left({
                "error": "invalid_date",
                "message": f"Invalid date {raw_date!r}",
                "date": raw_date,
            })

    return Right(NewExpense(
        amount=paise,
        description=description.strip(),
        category=category,
        payment_mode=payment_mode,
        date=when,
        notes=notes,
    ))
