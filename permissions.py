"""
Capability table per role.

Only the facility manager edits the roster, tasks, planning, calendar and
settings or moderates the board. Technical staff may also move incidents
through their states. Everybody may report incidents and post messages.
"""
from pydantic import BaseModel, ConfigDict


class Permissions(BaseModel):
    model_config = ConfigDict(frozen=True)

    can_edit_agents: bool = False
    can_edit_tasks: bool = False
    can_edit_planning: bool = False
    can_edit_calendar: bool = False
    can_access_settings: bool = False
    can_moderate_messages: bool = False
    can_update_incidents: bool = False
    can_report_incidents: bool = True
    can_post_messages: bool = True


MANAGER = Permissions(
    can_edit_agents=True,
    can_edit_tasks=True,
    can_edit_planning=True,
    can_edit_calendar=True,
    can_access_settings=True,
    can_moderate_messages=True,
    can_update_incidents=True,
)
TECHNICAL = Permissions(can_update_incidents=True)
DEFAULT = Permissions()

_TABLE = {
    'manager': MANAGER,
    'technical': TECHNICAL,
}


def permissions_for(role: str) -> Permissions:
    return _TABLE.get((role or '').strip().lower(), DEFAULT)
