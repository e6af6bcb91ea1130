"""
Agent status for a given day.

``derive_status`` answers "is this agent working on that date": leave wins,
then any detailed shift in the surrounding Sunday-to-Saturday week, then the
standard weekly pattern. ``inactive`` is never derived; it is an explicit
administrator override honoured by ``effective_status``.
"""
from datetime import date, timedelta
from typing import Tuple

from errors import DateLike, parse_iso_date
from schemas import REST_MARKER, WEEKDAYS, Agent, Status


def weekday_name(day: date) -> str:
    return WEEKDAYS[day.weekday()]


def week_bounds(day: date) -> Tuple[date, date]:
    """Sunday-start calendar week containing ``day``."""
    start = day - timedelta(days=(day.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


def is_rest(entry: str) -> bool:
    return not entry or not entry.strip() or entry.strip() == REST_MARKER


def has_detailed_schedule_in_week(agent: Agent, day: date) -> bool:
    start, end = week_bounds(day)
    return any(start <= entry.date <= end for entry in agent.detailed_schedules)


def derive_status(agent: Agent, reference_date: DateLike) -> Status:
    day = parse_iso_date(reference_date, 'reference_date')

    # leave beats a detailed shift on the same day
    if day in agent.leave_dates:
        return 'on-leave'

    detailed_this_week = has_detailed_schedule_in_week(agent, day)
    standard = agent.weekly_schedule.for_weekday(weekday_name(day))

    if not detailed_this_week and is_rest(standard):
        return 'upcoming'
    if detailed_this_week or not is_rest(standard):
        return 'active'
    return agent.status


def effective_status(agent: Agent, reference_date: DateLike) -> Status:
    """Status shown to users: the stored ``inactive`` override, else the derived one."""
    if agent.status == 'inactive':
        parse_iso_date(reference_date, 'reference_date')
        return 'inactive'
    return derive_status(agent, reference_date)
