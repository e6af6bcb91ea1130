import os
import logging
from collections import defaultdict
from datetime import date, datetime, timezone
from typing import List, Optional, Dict, Any

from bson import ObjectId
from fastapi import FastAPI, HTTPException, Depends, Header, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from database import (
    COLLECTIONS, get_store, create_document, get_documents, get_document,
    update_document, delete_document, data_version,
)
from errors import PlanningError, parse_iso_date
from events import bus
from permissions import Permissions, permissions_for
from recurrence import expand
from status import effective_status
from calendar_view import DayViewCache, entries_for_date
from schemas import (
    Agent, Building, CalendarEvent, DetailedScheduleEntry, Incident, Message,
    Settings, Task,
)

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Colony Staff Operations API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

day_cache = DayViewCache(bus)

# ----- Schemas (request/response) -----
class TaskStatusRequest(BaseModel):
    status: str = Field(..., pattern='^(pending|in-progress|done)$')

class BulkAssignRequest(BaseModel):
    agent_id: str

class ReportIncidentRequest(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = ''
    building: str = ''
    room: str = ''
    reported_by: str = ''

class IncidentStatusRequest(BaseModel):
    state: str = Field(..., pattern='^(unresolved|in-progress|resolved)$')
    agent_id: Optional[str] = Field(None, description="Agent acting on the incident")

class PostMessageRequest(BaseModel):
    author: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)

class InstructionsRequest(BaseModel):
    items: List[str] = []

BULK_ASSIGN_LIMIT = 5


@app.exception_handler(PlanningError)
async def planning_error_handler(request: Request, exc: PlanningError):
    return JSONResponse(status_code=400, content={"detail": str(exc), "error": type(exc).__name__})


# ----- Helpers -----

def caller_permissions(x_role: str = Header('agent')) -> Permissions:
    return permissions_for(x_role)


def require(capability: str):
    def check(perms: Permissions = Depends(caller_permissions)):
        if not getattr(perms, capability):
            raise HTTPException(status_code=403, detail=f'Not allowed: {capability}')
        return perms
    return check


def get_or_404(collection_name: str, doc_id: str, label: str) -> dict:
    doc = get_document(collection_name, doc_id)
    if not doc:
        raise HTTPException(status_code=404, detail=f'{label} not found')
    return doc


def load_agents() -> List[Agent]:
    """Agents with their detailed schedule entries attached."""
    by_agent: Dict[str, List[DetailedScheduleEntry]] = defaultdict(list)
    for doc in get_documents('schedule'):
        by_agent[doc['agent_id']].append(DetailedScheduleEntry(**doc))
    agents = []
    for doc in get_documents('agent'):
        doc['detailed_schedules'] = by_agent.get(doc['id'], [])
        agents.append(Agent(**doc))
    return agents


def load_agent(agent_id: str) -> Agent:
    doc = get_or_404('agent', agent_id, 'Agent')
    doc['detailed_schedules'] = [DetailedScheduleEntry(**s) for s in get_documents('schedule', {'agent_id': agent_id})]
    return Agent(**doc)


def compute_day(day: date):
    return entries_for_date(
        day,
        [CalendarEvent(**d) for d in get_documents('calendarevent')],
        [Task(**d) for d in get_documents('task')],
        load_agents(),
        [Incident(**d) for d in get_documents('incident')],
    )


def agent_document(agent: Agent) -> dict:
    return agent.model_dump(mode='json', exclude={'id', 'detailed_schedules'})


# ----- Basic endpoints -----
@app.get("/")
def root():
    return {"ok": True, "service": "backend", "message": "Colony staff operations API running"}


@app.get("/schema")
def schema_index():
    return {"collections": COLLECTIONS}


@app.get("/permissions")
def my_permissions(perms: Permissions = Depends(caller_permissions)):
    return perms.model_dump()


# ----- Agents -----
@app.get('/agents')
def list_agents(day: Optional[str] = Query(None, alias="date")):
    reference = day or date.today()
    return [
        {**a.model_dump(mode='json'), 'effective_status': effective_status(a, reference)}
        for a in load_agents()
    ]


@app.post('/agents', dependencies=[Depends(require('can_edit_agents'))])
def create_agent(payload: Agent):
    aid = create_document('agent', agent_document(payload))
    return {"id": aid}


@app.put('/agents/{agent_id}', dependencies=[Depends(require('can_edit_agents'))])
def update_agent(agent_id: str, payload: Agent):
    doc = update_document('agent', agent_id, agent_document(payload))
    if doc is None:
        raise HTTPException(status_code=404, detail='Agent not found')
    return doc


@app.delete('/agents/{agent_id}', dependencies=[Depends(require('can_edit_agents'))])
def delete_agent(agent_id: str):
    if not delete_document('agent', agent_id):
        raise HTTPException(status_code=404, detail='Agent not found')
    # detailed entries share the agent's lifetime; tasks and incidents keep the dangling id
    for entry in get_documents('schedule', {'agent_id': agent_id}):
        delete_document('schedule', entry['id'])
    return {"ok": True}


@app.get('/agents/{agent_id}/status')
def agent_status(agent_id: str, day: Optional[str] = Query(None, alias="date")):
    agent = load_agent(agent_id)
    reference = day or date.today()
    return {
        "agent_id": agent_id,
        "date": str(reference),
        "status": effective_status(agent, reference),
        "stored_status": agent.status,
    }


@app.get('/agents/{agent_id}/schedules')
def agent_schedules(agent_id: str, day: Optional[str] = Query(None, alias="date")):
    get_or_404('agent', agent_id, 'Agent')
    q: Dict[str, Any] = {'agent_id': agent_id}
    if day:
        q['date'] = parse_iso_date(day).isoformat()
    items = get_documents('schedule', q)
    items.sort(key=lambda x: x.get('date') or '')
    return items


# ----- Detailed schedules -----
@app.post('/schedules', dependencies=[Depends(require('can_edit_agents'))])
def create_schedule(payload: DetailedScheduleEntry):
    get_or_404('agent', payload.agent_id, 'Agent')
    template = payload.model_copy(update={'id': str(ObjectId())})
    ids = []
    for entry in expand(template):
        ids.append(create_document('schedule', entry.model_dump(mode='json')))
    return {"id": template.id, "ids": ids, "count": len(ids)}


@app.put('/schedules/{entry_id}', dependencies=[Depends(require('can_edit_agents'))])
def update_schedule(entry_id: str, payload: DetailedScheduleEntry):
    # stored entries are single occurrences; a recurring rule is only expanded on create
    expand(payload)
    if payload.kind == 'recurring':
        raise HTTPException(status_code=400, detail='Edit one occurrence at a time; post a new template to repeat it')
    doc = update_document('schedule', entry_id, payload)
    if doc is None:
        raise HTTPException(status_code=404, detail='Schedule entry not found')
    return doc


@app.delete('/schedules/{entry_id}', dependencies=[Depends(require('can_edit_agents'))])
def delete_schedule(entry_id: str):
    if not delete_document('schedule', entry_id):
        raise HTTPException(status_code=404, detail='Schedule entry not found')
    return {"ok": True}


# ----- Tasks -----
@app.get('/tasks')
def list_tasks(agent_id: Optional[str] = None, building: Optional[str] = None, priority: Optional[str] = None, status: Optional[str] = None):
    q: Dict[str, Any] = {}
    if agent_id:
        q['agent_id'] = agent_id
    if building:
        q['building'] = building
    if priority:
        q['priority'] = priority
    if status:
        q['status'] = status
    return get_documents('task', q)


@app.post('/tasks', dependencies=[Depends(require('can_edit_tasks'))])
def create_task(payload: Task):
    data = payload.model_dump(mode='json', exclude={'id'})
    data['created_at'] = datetime.now(timezone.utc)
    tid = create_document('task', data)
    return {"id": tid}


@app.put('/tasks/{task_id}', dependencies=[Depends(require('can_edit_tasks'))])
def update_task(task_id: str, payload: Task):
    existing = get_or_404('task', task_id, 'Task')
    data = payload.model_dump(mode='json', exclude={'id', 'created_at'})
    data['created_at'] = existing.get('created_at')
    return update_document('task', task_id, data)


@app.delete('/tasks/{task_id}', dependencies=[Depends(require('can_edit_tasks'))])
def delete_task(task_id: str):
    if not delete_document('task', task_id):
        raise HTTPException(status_code=404, detail='Task not found')
    return {"ok": True}


@app.post('/tasks/{task_id}/status', dependencies=[Depends(require('can_edit_tasks'))])
def update_task_status(task_id: str, payload: TaskStatusRequest):
    doc = update_document('task', task_id, {'status': payload.status})
    if doc is None:
        raise HTTPException(status_code=404, detail='Task not found')
    return doc


@app.post('/tasks/bulk-assign', dependencies=[Depends(require('can_edit_tasks'))])
def bulk_assign(payload: BulkAssignRequest):
    get_or_404('agent', payload.agent_id, 'Agent')
    pending = get_documents('task', {'status': 'pending'}, limit=BULK_ASSIGN_LIMIT)
    for task in pending:
        update_document('task', task['id'], {'agent_id': payload.agent_id, 'status': 'in-progress'})
    logger.info("assigned %d pending tasks to agent %s", len(pending), payload.agent_id)
    return {"assigned": [t['id'] for t in pending]}


# ----- Incidents -----
@app.get('/incidents')
def list_incidents(state: Optional[str] = None):
    return get_documents('incident', {'state': state} if state else {})


@app.post('/incidents', dependencies=[Depends(require('can_report_incidents'))])
def report_incident(payload: ReportIncidentRequest):
    incident = Incident(**payload.model_dump(), reported_at=datetime.now(timezone.utc))
    iid = create_document('incident', incident)
    return {"id": iid}


@app.post('/incidents/{incident_id}/status', dependencies=[Depends(require('can_update_incidents'))])
def update_incident_status(incident_id: str, payload: IncidentStatusRequest):
    incident = get_or_404('incident', incident_id, 'Incident')
    updates: Dict[str, Any] = {'state': payload.state}
    if payload.state == 'resolved':
        updates['resolved_at'] = datetime.now(timezone.utc).isoformat()
    # whoever takes the incident in hand owns it, unless someone already does
    if payload.state == 'in-progress' and not incident.get('agent_id') and payload.agent_id:
        updates['agent_id'] = payload.agent_id
    return update_document('incident', incident_id, updates)


# ----- Messages -----
@app.get('/messages')
def list_messages():
    items = [Message(**d) for d in get_documents('message')]
    items.sort(key=lambda m: m.timestamp, reverse=True)
    return [m.model_dump(mode='json') for m in items]


@app.post('/messages', dependencies=[Depends(require('can_post_messages'))])
def post_message(payload: PostMessageRequest):
    message = Message(**payload.model_dump(), timestamp=datetime.now(timezone.utc))
    mid = create_document('message', message)
    return {"id": mid}


@app.delete('/messages/{message_id}', dependencies=[Depends(require('can_moderate_messages'))])
def delete_message(message_id: str):
    if not delete_document('message', message_id):
        raise HTTPException(status_code=404, detail='Message not found')
    return {"ok": True}


# ----- Calendar -----
@app.get('/calendar/events')
def list_calendar_events():
    return get_documents('calendarevent')


def event_document(payload: CalendarEvent) -> dict:
    data = payload.model_dump(mode='json', exclude={'id'})
    if payload.type != 'event':
        data['child_count'] = None
    return data


@app.post('/calendar/events', dependencies=[Depends(require('can_edit_calendar'))])
def create_calendar_event(payload: CalendarEvent):
    eid = create_document('calendarevent', event_document(payload))
    return {"id": eid}


@app.put('/calendar/events/{event_id}', dependencies=[Depends(require('can_edit_calendar'))])
def update_calendar_event(event_id: str, payload: CalendarEvent):
    doc = update_document('calendarevent', event_id, event_document(payload))
    if doc is None:
        raise HTTPException(status_code=404, detail='Event not found')
    return doc


@app.delete('/calendar/events/{event_id}', dependencies=[Depends(require('can_edit_calendar'))])
def delete_calendar_event(event_id: str):
    if not delete_document('calendarevent', event_id):
        raise HTTPException(status_code=404, detail='Event not found')
    return {"ok": True}


@app.get('/calendar/{day}')
def day_view(day: str):
    return [e.model_dump(mode='json') for e in day_cache.get(day, compute_day, data_version())]


# ----- Buildings & rooms -----
@app.get('/buildings')
def list_buildings():
    return get_documents('building')


@app.post('/buildings', dependencies=[Depends(require('can_edit_planning'))])
def create_building(payload: Building):
    bid = create_document('building', payload)
    return {"id": bid}


@app.put('/buildings/{building_id}', dependencies=[Depends(require('can_edit_planning'))])
def update_building(building_id: str, payload: Building):
    doc = update_document('building', building_id, payload.model_dump(mode='json', exclude={'id', 'created_at'}))
    if doc is None:
        raise HTTPException(status_code=404, detail='Building not found')
    return doc


@app.delete('/buildings/{building_id}', dependencies=[Depends(require('can_edit_planning'))])
def delete_building(building_id: str):
    if not delete_document('building', building_id):
        raise HTTPException(status_code=404, detail='Building not found')
    return {"ok": True}


# ----- Settings -----
@app.get('/settings')
def read_settings():
    stored = get_document('settings', 'settings') or {}
    return Settings(**stored).model_dump()


@app.put('/settings', dependencies=[Depends(require('can_access_settings'))])
def write_settings(payload: Settings):
    if update_document('settings', 'settings', payload) is None:
        create_document('settings', {'id': 'settings', **payload.model_dump()})
    return payload.model_dump()


@app.get('/settings/instructions')
def read_instructions():
    stored = get_document('settings', 'instructions') or {}
    return {"items": stored.get('items', [])}


@app.put('/settings/instructions', dependencies=[Depends(require('can_access_settings'))])
def write_instructions(payload: InstructionsRequest):
    items = [i.strip() for i in payload.items if i.strip()]
    if update_document('settings', 'instructions', {'items': items}) is None:
        create_document('settings', {'id': 'instructions', 'items': items})
    return {"items": items}


# Health
@app.get('/health')
def health():
    response = {
        "backend": "running",
        "storage": None,
        "collections": [],
    }
    try:
        store = get_store()
        response["storage"] = store.name
        response["collections"] = store.collection_names()[:10]
    except Exception as e:
        response["storage"] = f"error: {str(e)[:50]}"
    response["database_url"] = "set" if os.getenv("DATABASE_URL") else "not set"
    response["database_name"] = "set" if os.getenv("DATABASE_NAME") else "not set"
    return response


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
