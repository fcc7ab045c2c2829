"""Fuzzy date resolution.

Maps an approximate date expression to a concrete ``(earliest, latest)``
pair of ISO dates. Supported forms:

- Exact dates: ``1898-01-01`` (a time part is ignored)
- Months: ``1898-01``
- Years: ``1898``
- Decades: ``1890s``
- Centuries: ``19th century``
- Approximate years: ``c. 1898``, ``ca 1898``, ``circa 1898``, ``~1898``, ``1898?``
- Ranges of any of the above: ``1890/1898``, ``1890-1898``, ``1890 - 1898``,
  ``1890 to 1898``, ``between 1890 and 1898``

``1800s`` is read as the decade 1800-1809; use ``19th century`` for 1800-1899.
"""

import calendar
import re
from datetime import date, datetime
from typing import Protocol

from .exceptions import DateResolutionError

CIRCA_MARGIN_YEARS = 5


class DateResolver(Protocol):
    """Protocol for fuzzy date resolvers."""

    def resolve(self, expression: str) -> tuple[str, str]:
        """Resolve an expression to ``(earliest, latest)`` ISO dates.

        Raises:
            DateResolutionError: If the expression cannot be resolved
        """
        ...


class FuzzyDateResolver:
    """Regex based resolver for the date expressions used in datasets."""

    FULL_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:[T ].*)?$")
    MONTH = re.compile(r"^(\d{4})-(\d{2})$")
    YEAR = re.compile(r"^(\d{1,4})$")
    DECADE = re.compile(r"^(\d{3})0s$")
    CENTURY = re.compile(r"^(\d{1,2})(?:st|nd|rd|th)\s+century$", re.IGNORECASE)
    CIRCA = re.compile(
        r"^(?:c\.?|ca\.?|circa|~)\s*(\d{1,4})$|^(\d{1,4})\s*\?$", re.IGNORECASE
    )
    YEAR_SPAN = re.compile(r"^(\d{4})-(\d{4})$")
    RANGE = re.compile(
        r"^(?:between\s+)?(.+?)\s*(?:/|\s-\s|\s+to\s+|\s+and\s+|--)\s*(.+)$",
        re.IGNORECASE,
    )

    def resolve(self, expression: str) -> tuple[str, str]:
        if isinstance(expression, datetime):
            day = expression.date().isoformat()
            return day, day
        if isinstance(expression, date):
            day = expression.isoformat()
            return day, day
        if isinstance(expression, int) and not isinstance(expression, bool):
            expression = str(expression)
        if not isinstance(expression, str) or not expression.strip():
            raise DateResolutionError(None, str(expression))

        text = expression.strip()

        single = self._resolve_single(text)
        if single:
            return single

        match = self.YEAR_SPAN.match(text) or self.RANGE.match(text)
        if match:
            start = self._resolve_single(match.group(1).strip())
            end = self._resolve_single(match.group(2).strip())
            if start and end and start[0] <= end[1]:
                return start[0], end[1]

        raise DateResolutionError(None, expression)

    def earliest(self, expression: str) -> str:
        """Resolve an expression to its earliest date."""
        return self.resolve(expression)[0]

    def latest(self, expression: str) -> str:
        """Resolve an expression to its latest date."""
        return self.resolve(expression)[1]

    def _resolve_single(self, text: str) -> tuple[str, str] | None:
        """Resolve a non-range expression, or None if it is not recognized."""
        if match := self.FULL_DATE.match(text):
            year, month, day = (int(g) for g in match.groups())
            try:
                value = date(year, month, day).isoformat()
            except ValueError:
                return None
            return value, value

        if match := self.MONTH.match(text):
            year, month = int(match.group(1)), int(match.group(2))
            return self._month_range(year, month)

        if match := self.YEAR.match(text):
            return self._year_range(int(match.group(1)), int(match.group(1)))

        if match := self.DECADE.match(text):
            start = int(match.group(1)) * 10
            return self._year_range(start, start + 9)

        if match := self.CENTURY.match(text):
            century = int(match.group(1))
            if century < 1:
                return None
            start = (century - 1) * 100
            return self._year_range(max(start, 1), start + 99)

        if match := self.CIRCA.match(text):
            year = int(match.group(1) or match.group(2))
            return self._year_range(
                max(year - CIRCA_MARGIN_YEARS, 1), min(year + CIRCA_MARGIN_YEARS, 9999)
            )

        return None

    def _year_range(self, first: int, last: int) -> tuple[str, str] | None:
        if first < 1 or last > 9999 or first > last:
            return None
        return date(first, 1, 1).isoformat(), date(last, 12, 31).isoformat()

    def _month_range(self, year: int, month: int) -> tuple[str, str] | None:
        if year < 1 or not 1 <= month <= 12:
            return None
        last_day = calendar.monthrange(year, month)[1]
        return (
            date(year, month, 1).isoformat(),
            date(year, month, last_day).isoformat(),
        )
