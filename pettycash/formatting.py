"""Display helpers: amounts in rupees and human friendly dates."""

from __future__ import annotations

from datetime import datetime
from typing import Optional


def group_indian(n: int) -> str:
    """Group digits the Indian way: 12,34,567."""
    s = str(n)
    if len(s) <= 3:
        return s
    head, tail = s[:-3], s[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_rupees(paise: int, symbol: str = "₹") -> str:
    """Render integer paise as rupees, dropping trailing zero decimals."""
    sign = "-" if paise < 0 else ""
    rupees, rem = divmod(abs(int(paise)), 100)
    text = group_indian(rupees)
    if rem:
        text += "." + f"{rem:02d}".rstrip("0")
    return f"{sign}{symbol}{text}"


def relative_day(dt: datetime, now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    days = (now.date() - dt.date()).days
    if days == 0:
        return "Today"
    if days == 1:
        return "Yesterday"
    if 1 < days < 7:
        return f"{days} days ago"
    return dt.strftime("%d %b %Y")
