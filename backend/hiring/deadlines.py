"""
Job deadline helpers used for filtering, sorting and display.
"""
from datetime import datetime, timezone as dt_timezone

from dateutil import parser as date_parser
from django.utils import timezone

DEADLINE_FILTERS = ('urgent', 'week', 'month', 'no_deadline', 'all')

_DAY_SECONDS = 60 * 60 * 24


def _as_datetime(deadline):
    if deadline is None or deadline == '':
        return None
    if isinstance(deadline, str):
        deadline = date_parser.isoparse(deadline)
    if isinstance(deadline, datetime) and timezone.is_naive(deadline):
        deadline = deadline.replace(tzinfo=dt_timezone.utc)
    return deadline


def _days_until(deadline, now=None):
    now = now or timezone.now()
    return (deadline - now).total_seconds() / _DAY_SECONDS


def is_deadline_expired(deadline, now=None) -> bool:
    deadline = _as_datetime(deadline)
    if deadline is None:
        return False
    return deadline < (now or timezone.now())


def deadline_status(deadline, now=None) -> str:
    """Return one of ``none``, ``expired``, ``urgent`` (<3 days), ``soon`` (<7 days) or ``normal``."""
    deadline = _as_datetime(deadline)
    if deadline is None:
        return 'none'
    now = now or timezone.now()
    if deadline < now:
        return 'expired'
    days = _days_until(deadline, now)
    if days < 3:
        return 'urgent'
    if days < 7:
        return 'soon'
    return 'normal'


def deadline_text(deadline, now=None) -> str:
    deadline = _as_datetime(deadline)
    if deadline is None:
        return 'No deadline'
    now = now or timezone.now()
    if deadline < now:
        return 'Expired'

    hours = (deadline - now).total_seconds() / 3600
    days = int(hours // 24)

    if days == 0:
        whole_hours = int(hours)
        if whole_hours <= 1:
            return 'Due in 1 hour'
        return f"Due in {whole_hours} hours"

    if days == 1:
        return '1 day left'
    if days < 7:
        return f"{days} days left"

    weeks = days // 7
    if weeks == 1:
        return '1 week left'
    if weeks < 4:
        return f"{weeks} weeks left"

    months = days // 30
    if months <= 1:
        return '1 month left'
    return f"{months} months left"


def filter_jobs_by_deadline(jobs, deadline_filter='all', now=None):
    """Filter objects exposing ``deadline``; ``all`` hides expired postings."""
    now = now or timezone.now()

    def within(job, max_days):
        deadline = _as_datetime(job.deadline)
        if deadline is None:
            return False
        days = _days_until(deadline, now)
        return 0 <= days < max_days

    if deadline_filter == 'urgent':
        return [job for job in jobs if within(job, 3)]
    if deadline_filter == 'week':
        return [job for job in jobs if within(job, 7)]
    if deadline_filter == 'month':
        return [job for job in jobs if within(job, 30)]
    if deadline_filter == 'no_deadline':
        return [job for job in jobs if not job.deadline]
    return [job for job in jobs if not is_deadline_expired(job.deadline, now)]


def sort_jobs_by_deadline(jobs, order='asc'):
    """Sort by deadline; jobs without one always go last."""
    with_deadline = [job for job in jobs if job.deadline]
    without_deadline = [job for job in jobs if not job.deadline]
    with_deadline.sort(key=lambda job: _as_datetime(job.deadline), reverse=(order == 'desc'))
    return with_deadline + without_deadline
