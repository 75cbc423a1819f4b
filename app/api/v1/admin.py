"""Admin console endpoints: list, create and edit users; create and delete roles."""

import json
from collections.abc import Callable
from enum import Enum
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse, RedirectResponse, Response
from sqlalchemy.orm import Session

from app.api.v1.auth import require_admin
from app.core.database import get_db
from app.models import User
from app.schemas.admin import (
    EditUserPageResponse,
    FieldErrorsResponse,
    IntentSuccessResponse,
    NewUserPageResponse,
    RoleOption,
    UserCreatedResponse,
    UserCreateForm,
    UserDetail,
    UserEditForm,
    UsersListResponse,
    UserSummary,
)
from app.services import accounts, roles
from app.services.errors import AdminFormError, NotFoundError
from app.services.validation import validate_form

router = APIRouter(dependencies=[Depends(require_admin)])

FORM_CONTENT_TYPES = frozenset({"application/x-www-form-urlencoded", "multipart/form-data"})


class FormIntent(str, Enum):
    """Which behavior a submission to the add-user endpoint selects."""

    CREATE_USER = "create-user"
    CREATE_ROLE = "create-role"
    DELETE_ROLE = "delete-role"

    @classmethod
    def parse(cls, raw: Any) -> "FormIntent":
        """Unknown or missing intents fall through to user creation."""
        try:
            return cls(raw)
        except ValueError:
            return cls.CREATE_USER


async def _read_submission(request: Request) -> dict[str, Any]:
    """
    Read a form post or JSON object into a plain dict.

    For form posts 'roles' is always a list (empty when no box is checked). For
    JSON, an omitted 'roles' key is left out so the schema default applies.
    """
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type == "application/json":
        try:
            body = await request.json()
        except json.JSONDecodeError as e:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Invalid JSON: {e!s}",
            ) from e
        if not isinstance(body, dict):
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="JSON body must be an object.",
            )
        return body
    if content_type in FORM_CONTENT_TYPES:
        form = await request.form()
        data: dict[str, Any] = {key: form.get(key) for key in form.keys() if key != "roles"}
        data["roles"] = form.getlist("roles")
        return data
    raise HTTPException(
        status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
        detail="Content-Type must be application/x-www-form-urlencoded, multipart/form-data or application/json.",
    )


def _errors_response(exc: AdminFormError) -> JSONResponse:
    body = FieldErrorsResponse(errors=exc.errors, status=400)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


def _success_response(form_type: str) -> JSONResponse:
    body = IntentSuccessResponse(form_type=form_type)
    return JSONResponse(status_code=status.HTTP_200_OK, content=body.model_dump(by_alias=True))


def _text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _role_options(db: Session) -> list[RoleOption]:
    return [RoleOption.model_validate(role) for role in roles.list_roles(db)]


def _load_user(db: Session, user_id: int) -> User:
    try:
        return accounts.get_user(db, user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e


def _handle_create_role(request: Request, db: Session, data: dict[str, Any]) -> Response:
    roles.create_role(db, _text(data.get("roleName")))
    return _success_response("role")


def _handle_delete_role(request: Request, db: Session, data: dict[str, Any]) -> Response:
    roles.delete_role(db, _text(data.get("roleName")))
    return _success_response("delete-role")


def _handle_create_user(request: Request, db: Session, data: dict[str, Any]) -> Response:
    form = validate_form(UserCreateForm, data)
    accounts.create_user(db, form)
    return RedirectResponse(
        url=str(request.url_for("user_created")),
        status_code=status.HTTP_303_SEE_OTHER,
    )


INTENT_HANDLERS: dict[FormIntent, Callable[[Request, Session, dict[str, Any]], Response]] = {
    FormIntent.CREATE_USER: _handle_create_user,
    FormIntent.CREATE_ROLE: _handle_create_role,
    FormIntent.DELETE_ROLE: _handle_delete_role,
}


@router.get("/users", response_model=UsersListResponse)
def list_users(db: Annotated[Session, Depends(get_db)]) -> UsersListResponse:
    """List all users with their role names, newest first."""
    users = accounts.list_users(db)
    return UsersListResponse(
        users=[
            UserSummary(
                id=u.id,
                email=u.email,
                username=u.username,
                name=u.name,
                roles=u.role_names,
                created_at=u.created_at,
            )
            for u in users
        ]
    )


@router.get("/users/new", response_model=NewUserPageResponse)
def new_user_page(db: Annotated[Session, Depends(get_db)]) -> NewUserPageResponse:
    """Roles available to the add-user form; 'user' is pre-selected."""
    return NewUserPageResponse(available_roles=_role_options(db))


@router.post(
    "/users/new",
    responses={
        200: {"model": IntentSuccessResponse},
        303: {"description": "User created; redirects to the confirmation view"},
        400: {"model": FieldErrorsResponse},
    },
)
async def submit_new_user_form(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    """
    Shared endpoint for three behaviors selected by the hidden `intent` field:

    - **create-role**: create the role named by `roleName` (stored lowercase).
    - **delete-role**: delete the role named by `roleName`; `admin` and `user` are refused.
    - anything else: create a user from `email`, `username`, `password`, `name`, `roles`.

    Rejections return 400 with `{"errors": {field: [messages]}, "status": 400}`.
    """
    data = await _read_submission(request)
    intent = FormIntent.parse(data.get("intent"))
    handler = INTENT_HANDLERS[intent]
    try:
        return handler(request, db, data)
    except AdminFormError as e:
        return _errors_response(e)


@router.get("/users/created", response_model=UserCreatedResponse, name="user_created")
def user_created(request: Request) -> UserCreatedResponse:
    """Confirmation after a successful user creation."""
    return UserCreatedResponse(
        message="The new user account has been created and is ready to use.",
        links={
            "create_another": str(request.url_for("new_user_page")),
            "all_users": str(request.url_for("list_users")),
        },
    )


@router.get("/users/{user_id}/edit", response_model=EditUserPageResponse)
def edit_user_page(
    user_id: int,
    db: Annotated[Session, Depends(get_db)],
) -> EditUserPageResponse:
    """One user plus every role, for the edit form. 404 if the user does not exist."""
    user = _load_user(db, user_id)
    return EditUserPageResponse(
        user=UserDetail(
            id=user.id,
            email=user.email,
            username=user.username,
            name=user.name,
            roles=user.role_names,
        ),
        available_roles=_role_options(db),
    )


@router.post(
    "/users/{user_id}/edit",
    responses={
        303: {"description": "User updated; redirects to the user listing"},
        400: {"model": FieldErrorsResponse},
        404: {"description": "User not found"},
    },
)
async def submit_edit_user_form(
    user_id: int,
    request: Request,
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    """
    Overwrite email, username and name, and replace the user's roles with exactly
    the submitted set. Submitting no roles removes them all.
    """
    _load_user(db, user_id)
    data = await _read_submission(request)
    try:
        form = validate_form(UserEditForm, data)
        accounts.update_user(db, user_id, form)
    except AdminFormError as e:
        return _errors_response(e)
    except NotFoundError as e:
        # Deleted after the initial load.
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e
    return RedirectResponse(
        url=str(request.url_for("list_users")),
        status_code=status.HTTP_303_SEE_OTHER,
    )
