from fastapi import APIRouter, HTTPException

from portal.api.deps import CanManageAnnouncements, OptionalUser, RemoteDep, StoreDep
from portal.models.notice import Announcement, AnnouncementCreate, AnnouncementUpdate
from portal.store import Action, ActionType
from portal.services.announcements import (
    add_announcement,
    delete_announcement,
    update_announcement,
    visible_announcements,
)

router = APIRouter()


def _ensure_exists(store, announcement_id: str) -> None:
    if not any(a.id == announcement_id for a in store.state.announcements):
        raise HTTPException(status_code=404, detail="Announcement not found")


@router.get("/", response_model=list[Announcement])
async def list_announcements(user: OptionalUser, store: StoreDep, category: str | None = None):
    """Announcements visible to the caller, most recent first."""
    announcements = visible_announcements(store.state.announcements, user.role if user else None)
    if category:
        announcements = [a for a in announcements if a.category == category]
    return announcements


@router.post("/", response_model=Announcement, status_code=201)
async def create_announcement(
    data: AnnouncementCreate, user: CanManageAnnouncements, store: StoreDep, remote: RemoteDep
):
    announcement = await add_announcement(remote, data)
    store.dispatch(Action(ActionType.ADD_ANNOUNCEMENT, announcement))
    return announcement


@router.patch("/{announcement_id}", response_model=Announcement)
async def edit_announcement(
    announcement_id: str,
    data: AnnouncementUpdate,
    user: CanManageAnnouncements,
    store: StoreDep,
    remote: RemoteDep,
):
    _ensure_exists(store, announcement_id)
    updated = await update_announcement(remote, announcement_id, data)
    store.dispatch(Action(ActionType.UPDATE_ANNOUNCEMENT, updated))
    return updated


@router.delete("/{announcement_id}", status_code=204)
async def remove_announcement(
    announcement_id: str, user: CanManageAnnouncements, store: StoreDep, remote: RemoteDep
):
    _ensure_exists(store, announcement_id)
    await delete_announcement(remote, announcement_id)
    store.dispatch(Action(ActionType.DELETE_ANNOUNCEMENT, announcement_id))
