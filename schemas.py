"""
Database Schemas for the colony staff-operations dashboard

Each Pydantic model corresponds to a collection (collection name = class name lowercase,
detailed schedule entries live in "schedule"). Documents carry a string "id" once stored.
"""
from typing import Annotated, List, Optional, Literal

from pydantic import AfterValidator, BaseModel, Field, field_validator
from datetime import date, datetime

from errors import InvalidInput, parse_iso_date

Status = Literal['active', 'on-leave', 'inactive', 'upcoming']
RoleType = Literal['manager', 'technical', 'maintenance', 'custom']

REST_MARKER = 'Repos'
WEEKDAYS = ('monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday')


def _not_blank(value: str) -> str:
    if not value or not value.strip():
        raise ValueError('must not be empty')
    return value


NonBlank = Annotated[str, AfterValidator(_not_blank)]


# Staff
class WeeklySchedule(BaseModel):
    """One interval-or-rest string per weekday, e.g. "08:00-17:00" or "Repos"."""
    monday: str = REST_MARKER
    tuesday: str = REST_MARKER
    wednesday: str = REST_MARKER
    thursday: str = REST_MARKER
    friday: str = REST_MARKER
    saturday: str = REST_MARKER
    sunday: str = REST_MARKER

    def for_weekday(self, name: str) -> str:
        return getattr(self, name)


class Recurrence(BaseModel):
    frequency: Literal['daily', 'weekly', 'monthly']
    weekdays: Optional[List[int]] = Field(None, description="0 = Sunday ... 6 = Saturday, used by weekly")
    end_date: Optional[date] = None
    max_occurrences: Optional[int] = Field(None, ge=1)

    @field_validator('weekdays')
    @classmethod
    def weekday_range(cls, value):
        if value is not None and any(d < 0 or d > 6 for d in value):
            raise ValueError('weekdays must be between 0 (Sunday) and 6 (Saturday)')
        return value


class DetailedScheduleEntry(BaseModel):
    id: Optional[str] = None
    agent_id: str
    date: date
    start_time: str
    end_time: str
    break_start: Optional[str] = None
    break_end: Optional[str] = None
    kind: Literal['one-off', 'recurring'] = 'one-off'
    recurrence: Optional[Recurrence] = None
    status: Literal['planned', 'confirmed', 'cancelled'] = 'planned'
    notes: str = ''


class Agent(BaseModel):
    id: Optional[str] = None
    first_name: NonBlank
    last_name: NonBlank
    phone: str = ''
    email: str = ''
    role: str = Field('', description="Display label of the role")
    role_type: RoleType = 'technical'
    role_color: str = '#059669'
    weekly_schedule: WeeklySchedule = Field(default_factory=WeeklySchedule)
    leave_dates: List[date] = Field(default_factory=list)
    status: Status = 'active'
    assigned_tasks: List[str] = Field(default_factory=list)
    manager_notes: str = ''
    detailed_schedules: List[DetailedScheduleEntry] = Field(default_factory=list)

    @field_validator('weekly_schedule', mode='before')
    @classmethod
    def missing_schedule_is_rest(cls, value):
        return WeeklySchedule() if value is None else value

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


# Work items
class Task(BaseModel):
    id: Optional[str] = None
    title: NonBlank
    description: str = ''
    agent_id: Optional[str] = None
    building: str = ''
    priority: Literal['low', 'normal', 'high'] = 'normal'
    status: Literal['pending', 'in-progress', 'done'] = 'pending'
    created_at: Optional[datetime] = None
    due_date: Optional[str] = Field(None, description="ISO date, optionally with a time part")

    @field_validator('due_date')
    @classmethod
    def due_date_is_iso(cls, value):
        if value:
            try:
                parse_iso_date(value.split('T')[0], 'due_date')
            except InvalidInput as exc:
                raise ValueError(str(exc))
        return value


class Incident(BaseModel):
    id: Optional[str] = None
    title: NonBlank
    description: str = ''
    building: str = ''
    room: str = ''
    reported_by: str = ''
    reported_at: datetime
    state: Literal['unresolved', 'in-progress', 'resolved'] = 'unresolved'
    resolved_at: Optional[datetime] = None
    agent_id: Optional[str] = None


class Message(BaseModel):
    id: Optional[str] = None
    author: NonBlank
    body: NonBlank
    timestamp: datetime


class CalendarEvent(BaseModel):
    id: Optional[str] = None
    date: date
    type: Literal['task', 'leave', 'maintenance', 'event'] = 'event'
    title: NonBlank
    description: str = ''
    agent_id: Optional[str] = None
    child_count: Optional[int] = Field(None, ge=0, description="Only meaningful for type 'event'")


# Facility
class Room(BaseModel):
    id: str
    name: str
    type: Literal['bedroom', 'common-room', 'kitchen', 'office', 'sanitary', 'technical', 'other'] = 'other'
    agent_id: Optional[str] = None
    task: Optional[str] = None
    notes: str = ''


class Building(BaseModel):
    id: Optional[str] = None
    name: NonBlank
    description: str = ''
    color: str = '#3b82f6'
    created_at: Optional[datetime] = None
    rooms: List[Room] = Field(default_factory=list)


class Settings(BaseModel):
    colony_name: str = 'Colonie de Vacances'
    address: str = ''
    phone: str = ''
    email: str = ''
    max_capacity: int = Field(100, ge=0)
    theme_color: str = '#3b82f6'
    notifications_email: bool = True
    notifications_sms: bool = False
    language: str = 'fr'
    timezone: str = 'Europe/Paris'
    date_format: str = 'DD/MM/YYYY'
    time_format: Literal['12h', '24h'] = '24h'
    auto_backup: bool = True
    session_minutes: int = Field(480, ge=1)
    log_level: str = 'info'
    maintenance_mode: bool = False


# Derived view
class DayEntry(BaseModel):
    id: str
    date: date
    category: Literal['event', 'task', 'leave', 'schedule', 'incident']
    marker: str
    title: NonBlank
    description: str = ''
    agent_id: Optional[str] = None
    status: str = 'planned'
