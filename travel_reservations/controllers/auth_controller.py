"""Controller layer for accounts and sessions."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import BaseModel, Field

from travel_reservations.controllers.dependencies import (
    bearer_scheme,
    get_auth_service,
    require_admin,
    require_user,
)
from travel_reservations.domain.errors import PersistenceFailure
from travel_reservations.services.auth_service import (
    AuthService,
    InvalidCredentialsError,
    Session,
    UnknownUserError,
    UsernameTakenError,
)
from travel_reservations.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["auth"])


class RegisterRequest(BaseModel):
    username: str = Field(min_length=1, max_length=49, pattern=r"^\S+$")
    password: str = Field(min_length=1, max_length=128)


class CreateUserRequest(RegisterRequest):
    is_admin: bool = False


class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    expect_admin: bool | None = None


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    username: str
    is_admin: bool


class UserResponse(BaseModel):
    username: str
    is_admin: bool


def _create_account(auth_service: AuthService, payload: RegisterRequest, is_admin: bool) -> UserResponse:
    try:
        account = auth_service.register(payload.username, payload.password, is_admin=is_admin)
        return UserResponse(username=account.username, is_admin=account.is_admin)
    except UsernameTakenError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    except InvalidCredentialsError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except PersistenceFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
        ) from exc


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    return _create_account(auth_service, payload, is_admin=False)


@router.post("/login", response_model=LoginResponse, status_code=status.HTTP_200_OK)
async def login(
    payload: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    try:
        token = auth_service.login(
            payload.username,
            payload.password,
            expect_admin=payload.expect_admin,
        )
        session = auth_service.resolve(token)
        return LoginResponse(
            access_token=token,
            username=session.username,
            is_admin=session.is_admin,
        )
    except InvalidCredentialsError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    _: Session = Depends(require_user),
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> Response:
    if credentials is not None:
        auth_service.logout(credentials.credentials)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=UserResponse)
async def me(session: Session = Depends(require_user)) -> UserResponse:
    return UserResponse(username=session.username, is_admin=session.is_admin)


@router.get("/users", response_model=list[UserResponse], dependencies=[Depends(require_admin)])
async def list_users(
    auth_service: AuthService = Depends(get_auth_service),
) -> list[UserResponse]:
    return [
        UserResponse(username=account.username, is_admin=account.is_admin)
        for account in auth_service.list_users()
    ]


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_user(
    payload: CreateUserRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    return _create_account(auth_service, payload, is_admin=payload.is_admin)


@router.delete("/users/{username}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    username: str,
    session: Session = Depends(require_admin),
    auth_service: AuthService = Depends(get_auth_service),
) -> Response:
    if username == session.username:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Administrators cannot delete their own account",
        )
    try:
        auth_service.delete_user(username)
    except UnknownUserError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except PersistenceFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
        ) from exc
    logger.info("Admin %s deleted user %s", session.username, username)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
