"""Transport routes together with their owned bus stops."""
from __future__ import annotations

from portal.models.transport import BusStop, TransportRoute, TransportRouteCreate, TransportRouteUpdate
from portal.remote.base import Embed, RemoteClient, first_row
from portal.services.mapping import route_from_row, stops_to_rows, to_backend_shape

TABLE = "transport_routes"
STOPS_TABLE = "bus_stops"
STOPS = Embed(name="stops", table=STOPS_TABLE, foreign_key="route_id")


async def _fetch_route(client: RemoteClient, route_id: str) -> TransportRoute:
    row = await client.db.select_one(TABLE, eq={"id": route_id}, embed=STOPS)
    return TransportRoute.model_validate(route_from_row(row))


async def _insert_stops(client: RemoteClient, route_id: str, stops: list[BusStop]) -> None:
    if stops:
        await client.db.insert(STOPS_TABLE, stops_to_rows([s.model_dump() for s in stops], route_id))


async def list_routes(client: RemoteClient) -> list[TransportRoute]:
    rows = await client.db.select(TABLE, embed=STOPS)
    return [TransportRoute.model_validate(route_from_row(row)) for row in rows]


async def add_route(client: RemoteClient, data: TransportRouteCreate) -> TransportRoute:
    details = data.to_client(exclude={"stops"})
    route = first_row(await client.db.insert(TABLE, [to_backend_shape(details)]), TABLE)
    await _insert_stops(client, route["id"], data.stops)
    return await _fetch_route(client, route["id"])


async def update_route(client: RemoteClient, route_id: str, data: TransportRouteUpdate) -> TransportRoute:
    """Update route details; a given stop list replaces all existing stops (stop ids change)."""
    details = data.to_client(exclude_unset=True, exclude={"stops"})
    first_row(await client.db.update(TABLE, to_backend_shape(details), eq={"id": route_id}), TABLE)
    if data.stops is not None:
        await client.db.delete(STOPS_TABLE, eq={"route_id": route_id})
        await _insert_stops(client, route_id, data.stops)
    return await _fetch_route(client, route_id)


async def delete_route(client: RemoteClient, route_id: str) -> None:
    # stops are removed with the route
    await client.db.delete(TABLE, eq={"id": route_id})
