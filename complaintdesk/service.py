"""HTTP API for registering users and tracking their complaints."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, List, Optional, Sequence, Type, TypeVar

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .config import ServiceConfig
from .errors import (
    DuplicateEmailError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    UnauthorizedError,
)
from .models import Complaint, User
from .security import authorize_view, get_store, read_secret, require_admin, require_user
from .store import MAX_RATING, MIN_RATING, Store

logger = logging.getLogger("complaintdesk.service")

RequestModel = TypeVar("RequestModel", bound=BaseModel)


def _require_text(value: str, field_name: str) -> str:
    stripped = value.strip()
    if not stripped:
        raise ValueError(f"{field_name} must not be empty")
    return stripped


class _StrictRequest(BaseModel):
    model_config = ConfigDict(strict=True)


class LoginRequest(_StrictRequest):
    secret_code: str = ""


class RegisterRequest(_StrictRequest):
    name: str
    email: str

    @field_validator("name")
    @classmethod
    def _normalize_name(cls, value: str) -> str:
        return _require_text(value, "name")

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return _require_text(value, "email")


class SubmitComplaintRequest(_StrictRequest):
    title: str
    summary: str = ""
    rating: int = Field(..., ge=MIN_RATING, le=MAX_RATING)

    @field_validator("title")
    @classmethod
    def _ensure_title(cls, value: str) -> str:
        _require_text(value, "title")
        return value


class ResolveComplaintRequest(_StrictRequest):
    complaint_id: str = ""


class UserView(BaseModel):
    id: str
    secret_code: str
    name: str
    email: str
    complaint_ids: List[str]


class ComplaintView(BaseModel):
    id: str
    title: str
    summary: str
    rating: int
    resolved: bool
    user_id: str
    date: datetime


class UserResponse(BaseModel):
    user: UserView


class ComplaintResponse(BaseModel):
    complaint: ComplaintView


class ComplaintListResponse(BaseModel):
    complaints: List[ComplaintView]


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str
    users: int
    complaints: int


def user_to_view(user: User) -> UserView:
    return UserView(
        id=user.id,
        secret_code=user.secret_code,
        name=user.name,
        email=user.email,
        complaint_ids=list(user.complaint_ids),
    )


def complaint_to_view(complaint: Complaint) -> ComplaintView:
    return ComplaintView(
        id=complaint.id,
        title=complaint.title,
        summary=complaint.summary,
        rating=complaint.rating,
        resolved=complaint.resolved,
        user_id=complaint.user_id,
        date=complaint.date,
    )


def _format_validation_errors(errors: Sequence[Any]) -> str:
    messages: List[str] = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = str(error.get("msg", "Invalid value"))
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages) or "Invalid request"


async def _parse_body(request: Request, model: Type[RequestModel]) -> RequestModel:
    """Decode and validate a JSON body once the caller has been authorised."""

    try:
        payload = await request.json()
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON") from exc

    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=_format_validation_errors(exc.errors()),
        ) from exc


def register_api_routes(app: FastAPI) -> None:
    """Expose the complaint JSON API on the provided FastAPI application."""

    @app.get("/healthz", response_model=HealthResponse)
    async def healthcheck(store: Store = Depends(get_store)) -> HealthResponse:
        return HealthResponse(
            status="ok",
            users=store.count_users(),
            complaints=store.count_complaints(),
        )

    @app.post("/login", response_model=UserResponse)
    async def login(request: LoginRequest, store: Store = Depends(get_store)) -> UserResponse:
        try:
            user = store.authenticate_by_secret(request.secret_code)
        except NotFoundError as exc:
            logger.warning("Failed login attempt")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid secret code") from exc

        logger.info("User %s logged in", user.id)
        return UserResponse(user=user_to_view(user))

    @app.post("/register", status_code=status.HTTP_201_CREATED, response_model=UserResponse)
    async def register(request: RegisterRequest, store: Store = Depends(get_store)) -> UserResponse:
        try:
            user = store.create_user(request.name, request.email)
        except DuplicateEmailError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

        logger.info("Registered user %s", user.id)
        return UserResponse(user=user_to_view(user))

    @app.post("/submitComplaint", status_code=status.HTTP_201_CREATED, response_model=ComplaintResponse)
    async def submit_complaint(
        http_request: Request,
        user: User = Depends(require_user),
        store: Store = Depends(get_store),
    ) -> ComplaintResponse:
        request = await _parse_body(http_request, SubmitComplaintRequest)
        try:
            complaint = store.create_complaint(user.id, request.title, request.summary, request.rating)
        except InvalidInputError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
        except NotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid secret code") from exc

        logger.info(
            "User %s submitted complaint %s (rating=%s)",
            user.id,
            complaint.id,
            complaint.rating,
        )
        return ComplaintResponse(complaint=complaint_to_view(complaint))

    @app.get("/getAllComplaintsForUser", response_model=ComplaintListResponse)
    async def list_user_complaints(
        user: User = Depends(require_user),
        store: Store = Depends(get_store),
    ) -> ComplaintListResponse:
        try:
            complaints = store.get_user_complaints(user.id)
        except NotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid secret code") from exc
        return ComplaintListResponse(complaints=[complaint_to_view(item) for item in complaints])

    @app.get("/getAllComplaintsForAdmin", response_model=ComplaintListResponse)
    async def list_all_complaints(
        _: str = Depends(require_admin),
        store: Store = Depends(get_store),
    ) -> ComplaintListResponse:
        complaints = store.get_all_complaints()
        return ComplaintListResponse(complaints=[complaint_to_view(item) for item in complaints])

    @app.get("/viewComplaint", response_model=ComplaintResponse)
    async def view_complaint(
        complaint_id: Optional[str] = Query(default=None, alias="id"),
        secret: Optional[str] = Depends(read_secret),
        store: Store = Depends(get_store),
    ) -> ComplaintResponse:
        complaint_id = (complaint_id or "").strip()
        if not complaint_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Complaint ID required")

        try:
            complaint = store.get_complaint(complaint_id)
        except NotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

        try:
            authorize_view(store, secret, complaint)
        except UnauthorizedError as exc:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
        except ForbiddenError as exc:
            logger.warning("Denied access to complaint %s", complaint.id)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc

        return ComplaintResponse(complaint=complaint_to_view(complaint))

    @app.post("/resolveComplaint", response_model=MessageResponse)
    async def resolve_complaint(
        http_request: Request,
        _: str = Depends(require_admin),
        store: Store = Depends(get_store),
    ) -> MessageResponse:
        request = await _parse_body(http_request, ResolveComplaintRequest)
        try:
            complaint = store.resolve_complaint(request.complaint_id.strip())
        except NotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

        logger.info("Admin resolved complaint %s", complaint.id)
        return MessageResponse(message="Complaint resolved successfully")


def create_app(
    *,
    store: Store | None = None,
    config: ServiceConfig | None = None,
) -> FastAPI:
    """Instantiate the FastAPI application around a single :class:`Store`."""

    if store is None:
        settings = config or ServiceConfig()
        store = Store(admin_secret=settings.admin_secret)

    app = FastAPI(
        title="Complaint Desk API",
        version="0.1.0",
        description="Register users, collect rated complaints, and let an administrator resolve them.",
    )
    app.state.store = store

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": _format_validation_errors(exc.errors())},
        )

    register_api_routes(app)
    return app


__all__ = [
    "ComplaintListResponse",
    "ComplaintResponse",
    "ComplaintView",
    "HealthResponse",
    "MessageResponse",
    "UserResponse",
    "UserView",
    "complaint_to_view",
    "create_app",
    "register_api_routes",
    "user_to_view",
]
