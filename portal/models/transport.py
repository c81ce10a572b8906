"""Transport routes and their ordered bus stops."""
from typing import Optional

from pydantic import Field

from portal.models.base import ClientModel
from portal.models.student import RecordStatus


class BusStop(ClientModel):
    id: Optional[str] = None
    name: str
    time: str  # scheduled pickup, e.g. "07:45 AM"


class TransportRoute(ClientModel):
    id: str
    route_number: str
    route_name: str
    driver_name: str = ""
    driver_phone: str = ""
    vehicle_number: str = ""
    monthly_fee: float = 0
    status: RecordStatus = "active"
    stops: list[BusStop] = Field(default_factory=list)


class TransportRouteCreate(ClientModel):
    route_number: str
    route_name: str
    driver_name: str = ""
    driver_phone: str = ""
    vehicle_number: str = ""
    monthly_fee: float = 0
    status: RecordStatus = "active"
    stops: list[BusStop] = Field(default_factory=list)


class TransportRouteUpdate(ClientModel):
    """When `stops` is given it replaces every stop on the route."""
    route_number: Optional[str] = None
    route_name: Optional[str] = None
    driver_name: Optional[str] = None
    driver_phone: Optional[str] = None
    vehicle_number: Optional[str] = None
    monthly_fee: Optional[float] = None
    status: Optional[RecordStatus] = None
    stops: Optional[list[BusStop]] = None
