"""MongoDB adapter for the remote data service: one collection per table."""
from __future__ import annotations

import uuid
from collections import defaultdict
from typing import Any, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from portal.errors import TransportError
from portal.remote.base import DataService, Embed

# parent table -> [(child table, foreign key)] removed along with the parent
CASCADES: dict[str, list[tuple[str, str]]] = {
    "transport_routes": [("bus_stops", "route_id")],
}

TABLES = [
    "students",
    "teachers",
    "profiles",
    "announcements",
    "events",
    "transport_routes",
    "bus_stops",
    "exams",
    "attendance",
    "results",
]

UNIQUE_KEYS: dict[str, list[tuple[str, ...]]] = {
    "students": [("roll_number",)],
    "teachers": [("username",)],
    "results": [("student_id", "exam_id")],
    "attendance": [("student_id", "date")],
}


def _new_id() -> str:
    return str(uuid.uuid4())


def _strip_object_id(doc: dict) -> dict:
    doc.pop("_id", None)
    return doc


class MongoDataService(DataService):
    def __init__(self, database: AsyncIOMotorDatabase):
        self._db = database

    async def ensure_indexes(self) -> None:
        """Unique ids per table plus natural keys used for upserts and logins."""
        try:
            for table in TABLES:
                await self._db[table].create_index("id", unique=True)
                for keys in UNIQUE_KEYS.get(table, []):
                    await self._db[table].create_index([(k, ASCENDING) for k in keys], unique=True)
            await self._db["bus_stops"].create_index("route_id")
        except PyMongoError as e:
            raise TransportError(f"Could not create indexes: {e}") from e

    async def select(
        self,
        table: str,
        *,
        eq: Optional[dict[str, Any]] = None,
        in_: Optional[tuple[str, list]] = None,
        order: Optional[str] = None,
        descending: bool = False,
        embed: Optional[Embed] = None,
        columns: Optional[list[str]] = None,
    ) -> list[dict]:
        query: dict[str, Any] = dict(eq or {})
        if in_:
            field, values = in_
            query[field] = {"$in": list(values)}
        projection: dict[str, bool] = {"_id": False}
        if columns:
            projection.update({c: True for c in columns})
        try:
            cursor = self._db[table].find(query, projection)
            if order:
                cursor = cursor.sort(order, DESCENDING if descending else ASCENDING)
            rows = await cursor.to_list(length=None)
            if embed and rows:
                parent_ids = [r["id"] for r in rows]
                children = await self._db[embed.table].find(
                    {embed.foreign_key: {"$in": parent_ids}}, {"_id": False}
                ).to_list(length=None)
                grouped: dict[str, list[dict]] = defaultdict(list)
                for child in children:
                    grouped[child[embed.foreign_key]].append(child)
                for row in rows:
                    row[embed.name] = grouped.get(row["id"], [])
        except PyMongoError as e:
            raise TransportError(f"Select from {table} failed: {e}") from e
        return rows

    async def insert(self, table: str, rows: list[dict]) -> list[dict]:
        docs = [{**row, "id": row.get("id") or _new_id()} for row in rows]
        if not docs:
            return []
        try:
            await self._db[table].insert_many(docs)
        except DuplicateKeyError as e:
            raise TransportError(f"Duplicate value violates a unique key on {table}", code="conflict") from e
        except PyMongoError as e:
            raise TransportError(f"Insert into {table} failed: {e}") from e
        return [_strip_object_id(doc) for doc in docs]

    async def update(self, table: str, values: dict, *, eq: dict[str, Any]) -> list[dict]:
        changes = {k: v for k, v in values.items() if k != "id"}
        try:
            if changes:
                await self._db[table].update_many(eq, {"$set": changes})
            return await self._db[table].find(eq, {"_id": False}).to_list(length=None)
        except DuplicateKeyError as e:
            raise TransportError(f"Duplicate value violates a unique key on {table}", code="conflict") from e
        except PyMongoError as e:
            raise TransportError(f"Update of {table} failed: {e}") from e

    async def delete(self, table: str, *, eq: dict[str, Any]) -> int:
        try:
            cascades = CASCADES.get(table, [])
            if cascades:
                parents = await self._db[table].find(eq, {"id": True}).to_list(length=None)
                parent_ids = [p["id"] for p in parents]
                for child_table, foreign_key in cascades:
                    await self._db[child_table].delete_many({foreign_key: {"$in": parent_ids}})
            result = await self._db[table].delete_many(eq)
        except PyMongoError as e:
            raise TransportError(f"Delete from {table} failed: {e}") from e
        return result.deleted_count

    async def upsert(self, table: str, rows: list[dict], *, on_conflict: tuple[str, ...]) -> list[dict]:
        saved: list[dict] = []
        try:
            for row in rows:
                key = {field: row[field] for field in on_conflict}
                changes = {k: v for k, v in row.items() if k != "id"}
                doc = await self._db[table].find_one_and_update(
                    key,
                    {"$set": changes, "$setOnInsert": {"id": row.get("id") or _new_id()}},
                    upsert=True,
                    projection={"_id": False},
                    return_document=ReturnDocument.AFTER,
                )
                saved.append(doc)
        except KeyError as e:
            raise TransportError(f"Upsert into {table} is missing conflict column {e}") from e
        except PyMongoError as e:
            raise TransportError(f"Upsert into {table} failed: {e}") from e
        return saved
