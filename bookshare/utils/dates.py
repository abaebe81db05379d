from datetime import datetime, timedelta

LOAN_PERIOD_DAYS = 14


def compute_due_date(borrowed_at: datetime, days: int = LOAN_PERIOD_DAYS) -> datetime:
    # fixed policy, no business-day adjustment
    return borrowed_at + timedelta(days=days)


def days_remaining(due_date: datetime, now: datetime) -> int:
    """Whole calendar days until the due date; negative once overdue."""
    return (due_date.date() - now.date()).days


def is_overdue(loan, now: datetime) -> bool:
    if loan.returned_at is not None:
        return False
    return loan.due_date < now


def iso(value):
    return value.isoformat() if value else None
