from datetime import date, datetime, timedelta
from typing import Optional, Tuple
import calendar


def parse_date(date_input: str) -> datetime:
    """Parse a single 'YYYY-MM-DD' date."""
    try:
        return datetime.strptime(date_input.strip(), "%Y-%m-%d")
    except ValueError:
        raise ValueError(
            f"Invalid date format: '{date_input}'. Please use YYYY-MM-DD format."
        ) from None


def parse_date_range(date_input: str) -> Tuple[datetime, datetime]:
    """
    Parse flexible date range input.

    Supported formats:
    - "YYYY-MM-DD - YYYY-MM-DD" (explicit range)
    - "YYYY-MM-DD" (single day)
    - "YYYY-MM" (entire month)

    Args:
        date_input: Date string in one of the supported formats

    Returns:
        Tuple of (start_date, end_date)
    """
    date_input = date_input.strip()

    # Range format: "2024-01-01 - 2024-01-31"
    if " - " in date_input:
        start_str, end_str = date_input.split(" - ", 1)
        start_date = parse_date(start_str)
        end_date = parse_date(end_str)
        if end_date < start_date:
            raise ValueError(f"End date {end_str.strip()} is before start date {start_str.strip()}")
        return start_date, end_date

    # Month format: "2024-01"
    elif len(date_input) == 7 and date_input.count("-") == 1:
        year_str, month_str = date_input.split("-")
        year, month = int(year_str), int(month_str)

        start_date = datetime(year, month, 1)
        _, last_day = calendar.monthrange(year, month)
        end_date = datetime(year, month, last_day)

        return start_date, end_date

    # Single day format: "2024-01-15"
    elif len(date_input) == 10 and date_input.count("-") == 2:
        day = parse_date(date_input)
        return day, day

    else:
        raise ValueError(
            f"Invalid date format: '{date_input}'. "
            "Use 'YYYY-MM-DD', 'YYYY-MM', or 'YYYY-MM-DD - YYYY-MM-DD'"
        )


def parse_days_back(days: int, today: Optional[date] = None) -> Tuple[datetime, datetime]:
    """
    Parse days back from today.

    Args:
        days: Number of days back from today
        today: Reference day (defaults to today)

    Returns:
        Tuple of (start_date, end_date)
    """
    today = today or date.today()
    end_date = datetime(today.year, today.month, today.day)
    start_date = end_date - timedelta(days=days)
    return start_date, end_date


def format_time_range(start_date: datetime, end_date: datetime) -> str:
    """Format a date range for display."""
    from_date = start_date.strftime("%Y-%m-%d")
    to_date = end_date.strftime("%Y-%m-%d")
    if from_date == to_date:
        return from_date
    return f"{from_date}..{to_date}"
