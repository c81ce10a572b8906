"""Username/password login against the auth service."""
from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from portal.api.deps import CurrentUser, RemoteDep, StoreDep
from portal.models.user import User
from portal.services.auth import login_user, logout_user

router = APIRouter()


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: User


@router.post("/login", response_model=LoginResponse)
async def login(req: LoginRequest, remote: RemoteDep, store: StoreDep):
    session = await login_user(remote, req.username, req.password)
    # the SIGNED_IN listener has already loaded the profile into the store
    user = store.state.user
    if not user or user.id != session.user_id:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Signed in, but the user profile could not be loaded.",
        )
    return LoginResponse(access_token=session.access_token, user=user)


@router.post("/logout", status_code=204)
async def logout(remote: RemoteDep):
    await logout_user(remote)


@router.get("/me", response_model=User)
async def me(user: CurrentUser):
    return user
