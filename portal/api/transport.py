"""Bus routes: public timetable and admin management."""
from fastapi import APIRouter, HTTPException

from portal.api.deps import CanManageTransport, RemoteDep, StoreDep
from portal.models.transport import TransportRoute, TransportRouteCreate, TransportRouteUpdate
from portal.store import Action, ActionType
from portal.services.transport import add_route, delete_route, update_route

router = APIRouter()


def _ensure_exists(store, route_id: str) -> None:
    if not any(r.id == route_id for r in store.state.transport_routes):
        raise HTTPException(status_code=404, detail="Route not found")


@router.get("/", response_model=list[TransportRoute])
async def list_routes(store: StoreDep):
    return [r for r in store.state.transport_routes if r.status == "active"]


@router.post("/", response_model=TransportRoute, status_code=201)
async def create_route(data: TransportRouteCreate, user: CanManageTransport, store: StoreDep, remote: RemoteDep):
    route = await add_route(remote, data)
    store.dispatch(Action(ActionType.ADD_ROUTE, route))
    return route


@router.patch("/{route_id}", response_model=TransportRoute)
async def edit_route(
    route_id: str, data: TransportRouteUpdate, user: CanManageTransport, store: StoreDep, remote: RemoteDep
):
    _ensure_exists(store, route_id)
    updated = await update_route(remote, route_id, data)
    store.dispatch(Action(ActionType.UPDATE_ROUTE, updated))
    return updated


@router.delete("/{route_id}", status_code=204)
async def remove_route(route_id: str, user: CanManageTransport, store: StoreDep, remote: RemoteDep):
    _ensure_exists(store, route_id)
    await delete_route(remote, route_id)
    store.dispatch(Action(ActionType.DELETE_ROUTE, route_id))
