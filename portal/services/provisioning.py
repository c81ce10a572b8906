"""Login provisioning for students and teachers as an explicit step sequence.

Creating a student or teacher with a login touches three places:

1. ``create_identity`` - an auth identity on the elevated admin channel;
2. ``insert_record`` - the public ``students``/``teachers`` row referencing it;
3. ``insert_profile`` - the generic ``profiles`` row (username, name, role).

If step 2 fails, the identity from step 1 is deleted exactly once and the
original error is re-raised. A failing step 3 is logged and reported in the
outcomes; the record is still returned.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from portal.errors import PortalError
from portal.models.user import AuthIdentity, Role
from portal.remote.base import RemoteClient, first_row

logger = logging.getLogger(__name__)


class StepStatus(str, Enum):
    DONE = "done"
    FAILED = "failed"
    COMPENSATED = "compensated"


@dataclass
class StepOutcome:
    step: str
    status: StepStatus
    error: Optional[Exception] = None


@dataclass
class ProvisionResult:
    identity: AuthIdentity
    record: dict
    outcomes: list[StepOutcome] = field(default_factory=list)


async def provision_login(
    client: RemoteClient,
    *,
    email: str,
    password: str,
    table: str,
    build_row: Callable[[str], dict],
    username: str,
    full_name: str,
    role: Role,
) -> ProvisionResult:
    outcomes: list[StepOutcome] = []

    identity = await client.admin.create_user(email, password)
    outcomes.append(StepOutcome("create_identity", StepStatus.DONE))

    try:
        rows = await client.db.insert(table, [build_row(identity.id)])
        record = first_row(rows, table)
    except PortalError as e:
        outcomes.append(StepOutcome("insert_record", StepStatus.FAILED, e))
        await _remove_identity(client, identity, outcomes)
        raise
    outcomes.append(StepOutcome("insert_record", StepStatus.DONE))

    try:
        await client.db.insert(
            "profiles",
            [{"id": identity.id, "username": username, "full_name": full_name, "role": role.value}],
        )
        outcomes.append(StepOutcome("insert_profile", StepStatus.DONE))
    except PortalError as e:
        logger.warning(f"Profile for login {identity.id} was not created: {e}")
        outcomes.append(StepOutcome("insert_profile", StepStatus.FAILED, e))

    return ProvisionResult(identity=identity, record=record, outcomes=outcomes)


async def _remove_identity(client: RemoteClient, identity: AuthIdentity, outcomes: list[StepOutcome]) -> None:
    try:
        await client.admin.delete_user(identity.id)
        outcomes.append(StepOutcome("create_identity", StepStatus.COMPENSATED))
    except PortalError as e:
        logger.error(f"Orphaned login {identity.id} ({identity.email}) could not be removed: {e}")
        outcomes.append(StepOutcome("delete_identity", StepStatus.FAILED, e))
