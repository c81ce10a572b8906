from fastapi import APIRouter, HTTPException

from portal.api.deps import CanManageEvents, OptionalUser, RemoteDep, StoreDep
from portal.models.notice import SchoolEvent, SchoolEventCreate, SchoolEventUpdate
from portal.store import Action, ActionType
from portal.services.events import add_event, delete_event, update_event

router = APIRouter()


def _ensure_exists(store, event_id: str) -> None:
    if not any(e.id == event_id for e in store.state.events):
        raise HTTPException(status_code=404, detail="Event not found")


@router.get("/", response_model=list[SchoolEvent])
async def list_events(user: OptionalUser, store: StoreDep, include_inactive: bool = False):
    """Public calendar; inactive events are only listed for signed-in users who ask."""
    events = store.state.events
    if not (include_inactive and user):
        events = [e for e in events if e.status == "active"]
    return events


@router.post("/", response_model=SchoolEvent, status_code=201)
async def create_event(data: SchoolEventCreate, user: CanManageEvents, store: StoreDep, remote: RemoteDep):
    event = await add_event(remote, data)
    store.dispatch(Action(ActionType.ADD_EVENT, event))
    return event


@router.patch("/{event_id}", response_model=SchoolEvent)
async def edit_event(
    event_id: str, data: SchoolEventUpdate, user: CanManageEvents, store: StoreDep, remote: RemoteDep
):
    _ensure_exists(store, event_id)
    updated = await update_event(remote, event_id, data)
    store.dispatch(Action(ActionType.UPDATE_EVENT, updated))
    return updated


@router.delete("/{event_id}", status_code=204)
async def remove_event(event_id: str, user: CanManageEvents, store: StoreDep, remote: RemoteDep):
    _ensure_exists(store, event_id)
    await delete_event(remote, event_id)
    store.dispatch(Action(ActionType.DELETE_EVENT, event_id))
