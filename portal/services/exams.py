from __future__ import annotations

from portal.models.exam import Exam, ExamCreate, ExamUpdate
from portal.remote.base import RemoteClient, first_row
from portal.services.mapping import to_backend_shape, to_client_shape

TABLE = "exams"


async def list_exams(client: RemoteClient) -> list[Exam]:
    rows = await client.db.select(TABLE)
    return [Exam.model_validate(to_client_shape(row)) for row in rows]


async def add_exam(client: RemoteClient, data: ExamCreate) -> Exam:
    rows = await client.db.insert(TABLE, [to_backend_shape(data.to_client())])
    return Exam.model_validate(to_client_shape(first_row(rows, TABLE)))


async def update_exam(client: RemoteClient, exam_id: str, data: ExamUpdate) -> Exam:
    rows = await client.db.update(TABLE, to_backend_shape(data.to_client(exclude_unset=True)), eq={"id": exam_id})
    return Exam.model_validate(to_client_shape(first_row(rows, TABLE)))


async def delete_exam(client: RemoteClient, exam_id: str) -> None:
    await client.db.delete(TABLE, eq={"id": exam_id})
