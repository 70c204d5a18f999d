"""FastAPI application that exposes the user registry over HTTP."""
from __future__ import annotations

import logging
import re
from typing import Dict, List

from fastapi import Depends, FastAPI, HTTPException, Request, Response, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, TypeAdapter, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .models import User, UserPatch
from .store import UserStore

logger = logging.getLogger("userregistry.api")

_USER_ID_PATTERN = re.compile(r"[+-]?[0-9]+")
_MIN_USER_ID = -(2**63)
_MAX_USER_ID = 2**63 - 1

_PATCH_ADAPTER = TypeAdapter(Dict[str, str])


class UserRequest(BaseModel):
    name: str
    lastname: str


class UserResponse(BaseModel):
    id: int
    name: str
    lastname: str


def user_to_response(user: User) -> UserResponse:
    return UserResponse(id=user.id, name=user.name, lastname=user.lastname)


def parse_user_id(user_id: str) -> int:
    """Resolve the ``{user_id}`` path segment or reject the request with 400.

    Accepts an optional sign followed by ASCII digits, within the signed
    64-bit range.
    """

    if not _USER_ID_PATTERN.fullmatch(user_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid user id")
    value = int(user_id)
    if not _MIN_USER_ID <= value <= _MAX_USER_ID:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid user id")
    return value


def _invalid_body(request: Request, exc: ValidationError) -> HTTPException:
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid request body")


async def read_user_request(request: Request) -> UserRequest:
    """Decode a ``{name, lastname}`` JSON body regardless of its Content-Type."""

    raw = await request.body()
    try:
        return UserRequest.model_validate_json(raw)
    except ValidationError as exc:
        raise _invalid_body(request, exc) from exc


async def read_user_patch(request: Request) -> UserPatch:
    raw = await request.body()
    try:
        updates = _PATCH_ADAPTER.validate_json(raw)
    except ValidationError as exc:
        raise _invalid_body(request, exc) from exc
    return UserPatch.from_mapping(updates)


def create_app(
    *,
    store: UserStore | None = None,
    uniform_not_found: bool = False,
) -> FastAPI:
    """Build the registry application around ``store``.

    ``GET /users/{id}`` reports a missing record as 404 while PATCH and DELETE
    report it as 400. Pass ``uniform_not_found=True`` to answer 404 for all
    three.
    """

    if store is None:
        store = UserStore()

    missing_status = status.HTTP_404_NOT_FOUND if uniform_not_found else status.HTTP_400_BAD_REQUEST

    app = FastAPI(
        title="User Registry",
        description="In-memory CRUD service for user records",
        version="1.0.0",
    )
    app.state.store = store

    def get_store() -> UserStore:
        return store

    # Handlers are plain functions so FastAPI runs each request on a worker
    # thread; UserStore serialises them. Dependencies resolve in declaration
    # order, so the path id is checked before any body is decoded.

    @app.get("/health")
    def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/users", response_model=List[UserResponse])
    def list_users(db: UserStore = Depends(get_store)) -> List[UserResponse]:
        return [user_to_response(user) for user in db.list()]

    @app.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
    def create_user(
        payload: UserRequest = Depends(read_user_request),
        db: UserStore = Depends(get_store),
    ) -> UserResponse:
        user = db.create(payload.name, payload.lastname)
        logger.info("Created user %s", user.id)
        return user_to_response(user)

    @app.get("/users/{user_id:path}", response_model=UserResponse)
    def read_user(
        target_id: int = Depends(parse_user_id),
        db: UserStore = Depends(get_store),
    ) -> UserResponse:
        user = db.get(target_id)
        if user is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        return user_to_response(user)

    @app.patch("/users/{user_id:path}", status_code=status.HTTP_204_NO_CONTENT)
    def patch_user(
        target_id: int = Depends(parse_user_id),
        patch: UserPatch = Depends(read_user_patch),
        db: UserStore = Depends(get_store),
    ) -> Response:
        updated = db.partial_update(target_id, patch)
        if updated is None:
            raise HTTPException(status_code=missing_status, detail="User not found")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.put("/users/{user_id:path}", status_code=status.HTTP_204_NO_CONTENT)
    def replace_user(
        target_id: int = Depends(parse_user_id),
        payload: UserRequest = Depends(read_user_request),
        db: UserStore = Depends(get_store),
    ) -> Response:
        db.replace(target_id, payload.name, payload.lastname)
        logger.info("Replaced user %s", target_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.delete("/users/{user_id:path}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_user(
        target_id: int = Depends(parse_user_id),
        db: UserStore = Depends(get_store),
    ) -> Response:
        if not db.delete(target_id):
            raise HTTPException(status_code=missing_status, detail="User not found")
        logger.info("Deleted user %s", target_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.api_route(
        "/users/{user_id:path}",
        methods=["POST", "HEAD", "OPTIONS", "TRACE"],
        include_in_schema=False,
    )
    def reject_user_method(_: int = Depends(parse_user_id)) -> Response:
        raise HTTPException(
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            detail="Method Not Allowed",
            headers={"Allow": "GET, PATCH, PUT, DELETE"},
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(_: Request, exc: StarletteHTTPException):
        return PlainTextResponse(
            str(exc.detail),
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    return app


__all__ = [
    "UserRequest",
    "UserResponse",
    "create_app",
    "parse_user_id",
    "read_user_patch",
    "read_user_request",
    "user_to_response",
]
