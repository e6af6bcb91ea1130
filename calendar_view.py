"""
Unified day view for the calendar page.

``entries_for_date`` merges five sources into display-ready ``DayEntry`` items
in a fixed order: explicit events, tasks due, leave, detailed shifts, open
incidents. Within a source the collection order is kept as given.
"""
import logging
from collections import OrderedDict
from datetime import date, timezone
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from errors import DateLike, parse_iso_date
from events import DataChange, DataChangeBus
from schemas import Agent, CalendarEvent, DayEntry, Incident, Task

logger = logging.getLogger(__name__)

UNASSIGNED = 'Unassigned'

EVENT_MARKERS = {
    'event': '📅',
    'task': '📋',
    'leave': '🏖️',
    'maintenance': '🔧',
}
TASK_MARKER = '📋'
LEAVE_MARKER = '🏖️'
SCHEDULE_MARKER = '⏰'
INCIDENT_MARKER = '🚨'


def _agent_name(agents_by_id: Dict[str, Agent], agent_id: Optional[str]) -> Optional[str]:
    agent = agents_by_id.get(agent_id) if agent_id else None
    return agent.display_name if agent else None


def _task_due_day(task: Task) -> Optional[date]:
    if not task.due_date:
        return None
    return parse_iso_date(task.due_date.split('T')[0], f'task {task.id} due_date')


def _incident_day(incident: Incident) -> date:
    reported = incident.reported_at
    if reported.tzinfo is not None:
        reported = reported.astimezone(timezone.utc)
    return reported.date()


def _event_entries(day: date, events: Iterable[CalendarEvent]) -> List[DayEntry]:
    return [
        DayEntry(
            id=event.id or f"event-{i}-{day.isoformat()}",
            date=day,
            category='event',
            marker=EVENT_MARKERS[event.type],
            title=event.title,
            description=event.description,
            agent_id=event.agent_id,
        )
        for i, event in enumerate(events)
        if event.date == day
    ]


def _task_entries(day: date, tasks: Iterable[Task], agents_by_id: Dict[str, Agent]) -> List[DayEntry]:
    entries = []
    for task in tasks:
        if _task_due_day(task) != day:
            continue
        assignee = _agent_name(agents_by_id, task.agent_id) or UNASSIGNED
        entries.append(DayEntry(
            id=f"task-{task.id}",
            date=day,
            category='task',
            marker=TASK_MARKER,
            title=f"{TASK_MARKER} {task.title}",
            description=f"{task.description} - {assignee} ({task.building})",
            agent_id=task.agent_id,
            status=task.status,
        ))
    return entries


def _leave_entries(day: date, agents: Iterable[Agent]) -> List[DayEntry]:
    return [
        DayEntry(
            id=f"leave-{agent.id}-{day.isoformat()}",
            date=day,
            category='leave',
            marker=LEAVE_MARKER,
            title=f"{LEAVE_MARKER} Leave - {agent.display_name}",
            description=agent.role,
            agent_id=agent.id,
        )
        for agent in agents
        if day in agent.leave_dates
    ]


def _schedule_entries(day: date, agents: Iterable[Agent]) -> List[DayEntry]:
    entries = []
    for agent in agents:
        for shift in agent.detailed_schedules:
            if shift.date != day:
                continue
            notes = f" | {shift.notes}" if shift.notes else ''
            entries.append(DayEntry(
                id=f"schedule-{agent.id}-{shift.id}-{day.isoformat()}",
                date=day,
                category='schedule',
                marker=SCHEDULE_MARKER,
                title=f"{SCHEDULE_MARKER} Shift - {agent.display_name}",
                description=f"{shift.start_time} - {shift.end_time}{notes} | {agent.role}",
                agent_id=agent.id,
                status=shift.status,
            ))
    return entries


def _incident_entries(day: date, incidents: Iterable[Incident], agents_by_id: Dict[str, Agent]) -> List[DayEntry]:
    entries = []
    for incident in incidents:
        if incident.state == 'resolved' or _incident_day(incident) != day:
            continue
        assignee = _agent_name(agents_by_id, incident.agent_id)
        owner = f" | Assigned to: {assignee}" if assignee else f" | {UNASSIGNED}"
        entries.append(DayEntry(
            id=f"incident-{incident.id}",
            date=day,
            category='incident',
            marker=INCIDENT_MARKER,
            title=f"{INCIDENT_MARKER} Incident: {incident.title}",
            description=f"{incident.description} | {incident.building} - {incident.room}{owner}",
            agent_id=incident.agent_id,
            status=incident.state,
        ))
    return entries


def entries_for_date(
    day: DateLike,
    events: Sequence[CalendarEvent],
    tasks: Sequence[Task],
    agents: Sequence[Agent],
    incidents: Sequence[Incident],
) -> List[DayEntry]:
    """All displayable items for ``day``; agents must carry their detailed schedules."""
    day = parse_iso_date(day)
    agents_by_id = {a.id: a for a in agents if a.id}
    return (
        _event_entries(day, events)
        + _task_entries(day, tasks, agents_by_id)
        + _leave_entries(day, agents)
        + _schedule_entries(day, agents)
        + _incident_entries(day, incidents, agents_by_id)
    )


class DayViewCache:
    """
    Memoises day views per (date, storage version).

    The version comes from the storage backend, so writes made by another
    worker or straight to the database still miss the cache. Local writes
    also clear it through the change channel. Only the most recently used
    ``max_entries`` views are kept.
    """

    def __init__(self, bus: Optional[DataChangeBus] = None, max_entries: int = 64):
        self.max_entries = max_entries
        self._entries: 'OrderedDict[Tuple[date, int], List[DayEntry]]' = OrderedDict()
        if bus is not None:
            bus.subscribe(self.invalidate)

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, day: DateLike, compute: Callable[[date], List[DayEntry]], version: int = 0) -> List[DayEntry]:
        key = (parse_iso_date(day), version)
        if key in self._entries:
            self._entries.move_to_end(key)
        else:
            self._entries[key] = compute(key[0])
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)
        return list(self._entries[key])

    def invalidate(self, change: Optional[DataChange] = None) -> None:
        if self._entries:
            logger.debug("day view cache cleared after %s", change)
        self._entries.clear()
