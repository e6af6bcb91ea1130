"""
Materialise recurring detailed-schedule templates into dated entries.

Candidates are visited one calendar day at a time from the template's date,
for every frequency, so month lengths never need special casing: a monthly
template on the 31st simply has no occurrence in months without a 31st.
"""
import logging
import uuid
from datetime import timedelta
from typing import List

from errors import InvalidRecurrence
from schemas import DetailedScheduleEntry, Recurrence

logger = logging.getLogger(__name__)

DEFAULT_MAX_OCCURRENCES = 52
# upper bound on days walked per requested occurrence; a monthly template
# pinned to the 31st needs at most two months between hits
DAYS_PER_OCCURRENCE_LIMIT = 62


def js_weekday(day) -> int:
    """0 = Sunday ... 6 = Saturday."""
    return (day.weekday() + 1) % 7


def _matches(recurrence: Recurrence, template: DetailedScheduleEntry, candidate) -> bool:
    if recurrence.frequency == 'daily':
        return True
    if recurrence.frequency == 'weekly':
        return js_weekday(candidate) in recurrence.weekdays
    return candidate.day == template.date.day


def expand(template: DetailedScheduleEntry) -> List[DetailedScheduleEntry]:
    if template.kind == 'one-off':
        return [template]

    recurrence = template.recurrence
    if recurrence is None:
        raise InvalidRecurrence("recurring schedule entry has no recurrence rule")
    if recurrence.frequency == 'weekly' and not recurrence.weekdays:
        raise InvalidRecurrence("weekly recurrence needs at least one weekday")

    max_occurrences = recurrence.max_occurrences or DEFAULT_MAX_OCCURRENCES
    base_id = template.id or uuid.uuid4().hex
    last_day = template.date + timedelta(days=max_occurrences * DAYS_PER_OCCURRENCE_LIMIT)
    if recurrence.end_date is not None and recurrence.end_date < last_day:
        last_day = recurrence.end_date

    occurrences: List[DetailedScheduleEntry] = []
    candidate = template.date
    while len(occurrences) < max_occurrences and candidate <= last_day:
        if _matches(recurrence, template, candidate):
            occurrences.append(template.model_copy(update={
                'id': f"{base_id}_{len(occurrences)}",
                'date': candidate,
            }))
        candidate += timedelta(days=1)

    logger.info("expanded %s recurrence from %s into %d entries",
                recurrence.frequency, template.date, len(occurrences))
    return occurrences
