# teamap/users/router.py
from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from teamap.core.config import settings
from teamap.core.deps import ACCESS_COOKIE, get_current_user, get_optional_user, viewer_id_of
from teamap.core.errors import AuthenticationError
from teamap.core.json import UTF8JSONResponse, success_response
from teamap.db.session import get_session
from teamap.users import service as svc
from teamap.users.models import User
from teamap.users.schemas import UserCreate, UserOut, UserUpdate

router = APIRouter(
    prefix="/api/users",
    tags=["users"],
    default_response_class=UTF8JSONResponse,
)


def _set_access_cookie(response: UTF8JSONResponse, token: str) -> UTF8JSONResponse:
    response.set_cookie(
        ACCESS_COOKIE,
        token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MIN * 60,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )
    return response


@router.post("/register/")
async def register(payload: UserCreate, db: AsyncSession = Depends(get_session)):
    user = await svc.register_user(db, payload)
    await db.commit()

    data = svc.auth_payload(user)
    response = success_response(data, "User registered successfully", 201)
    return _set_access_cookie(response, data["access_token"])


@router.post("/login/")
async def login(
    form: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_session),
):
    """
    Acepta x-www-form-urlencoded con:
    - username (o email)
    - password
    """
    user = await svc.authenticate_user(db, form.username, form.password)
    if not user:
        raise AuthenticationError("Invalid credentials", code="INVALID_CREDENTIALS")

    data = svc.auth_payload(user)
    response = success_response(data, "Login successful")
    return _set_access_cookie(response, data["access_token"])


@router.post("/logout/")
async def logout():
    response = success_response(None, "Logged out successfully")
    response.delete_cookie(ACCESS_COOKIE)
    return response


@router.get("/me/")
async def me(user: User = Depends(get_current_user)):
    return success_response(UserOut.model_validate(user).model_dump(), "User retrieved successfully")


@router.patch("/me/")
async def update_me(
    payload: UserUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    user = await svc.update_user(db, user, payload)
    await db.commit()
    return success_response(UserOut.model_validate(user).model_dump(), "Profile updated successfully")


@router.get("/{username}")
async def profile(
    username: str,
    viewer: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_session),
):
    data = await svc.get_profile(db, username, viewer_id_of(viewer))
    return success_response(data, "User retrieved successfully")


@router.post("/{username}/follow")
async def follow(
    username: str,
    viewer: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    data = await svc.follow_user(db, viewer, username)
    await db.commit()
    return success_response(data, "User followed successfully")


@router.delete("/{username}/follow")
async def unfollow(
    username: str,
    viewer: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    data = await svc.unfollow_user(db, viewer, username)
    await db.commit()
    return success_response(data, "User unfollowed successfully")
