"""
Date calculation service.
Handles challenge durations and calendar ranges.
"""
import calendar
from datetime import date, timedelta
from typing import Tuple

from dateutil.relativedelta import relativedelta

from taskduel.constants import (
    DURATION_DAY, DURATION_WEEK, DURATION_MONTH, DURATION_UNITS, DAYS_PER_WEEK
)
from taskduel.exceptions import InvalidArgumentException


class DateService:
    """Service for date-related operations"""

    @staticmethod
    def add_months(start: date, months: int) -> date:
        """
        Add calendar months, clamping the day to the end of the target month.

        Example: 2025-01-31 + 1 month -> 2025-02-28
        """
        return start + relativedelta(months=months)

    @staticmethod
    def add_years(start: date, years: int) -> date:
        """Add calendar years (Feb 29 clamps to Feb 28 in non-leap years)"""
        return start + relativedelta(years=years)

    @staticmethod
    def calculate_end_date(start: date, unit: str, count: int) -> date:
        """
        Calculate challenge end date from a duration.

        Args:
            start: Challenge start date
            unit: One of day, week, month, year
            count: Positive number of units

        Returns:
            End date, always after start

        Raises:
            InvalidArgumentException: If unit is unknown, count is not
                positive, or the end date falls outside the supported range
        """
        if unit not in DURATION_UNITS:
            raise InvalidArgumentException(
                "duration.type", f"'{unit}' is not one of {', '.join(DURATION_UNITS)}"
            )
        if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
            raise InvalidArgumentException("duration.count", "must be a positive integer")

        try:
            if unit == DURATION_DAY:
                return start + timedelta(days=count)
            if unit == DURATION_WEEK:
                return start + timedelta(days=count * DAYS_PER_WEEK)
            if unit == DURATION_MONTH:
                return DateService.add_months(start, count)
            return DateService.add_years(start, count)
        except (ValueError, OverflowError):
            raise InvalidArgumentException(
                "duration.count", f"{count} {unit}(s) from {start} is out of the supported date range"
            )

    @staticmethod
    def month_range(year: int, month: int) -> Tuple[date, date]:
        """
        Get first and last day of a month.

        Raises:
            InvalidArgumentException: If month is outside 1-12
        """
        if not 1 <= month <= 12:
            raise InvalidArgumentException("month", "must be between 1 and 12")
        last_day = calendar.monthrange(year, month)[1]
        return date(year, month, 1), date(year, month, last_day)
