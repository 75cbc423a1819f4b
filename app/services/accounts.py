"""User account reads and writes: listing, creation, edit and uniqueness checks."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.core.security import hash_password
from app.models import Password, User
from app.schemas.admin import UserCreateForm, UserEditForm
from app.services.errors import ConflictError, FormValidationError, NotFoundError
from app.services.roles import resolve_roles

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConflictMessages:
    """Messages reported when an email or username is already in use."""

    email: str
    username: str


CREATE_CONFLICTS = ConflictMessages(
    email="A user with this email already exists",
    username="A user with this username already exists",
)
EDIT_CONFLICTS = ConflictMessages(
    email="This email is already taken",
    username="This username is already taken",
)


def list_users(db: Session) -> list[User]:
    """All users with roles loaded, newest first."""
    return (
        db.query(User)
        .options(selectinload(User.roles))
        .order_by(User.created_at.desc(), User.id.desc())
        .all()
    )


def get_user(db: Session, user_id: int) -> User:
    """Load one user with roles; raise NotFoundError if absent."""
    user = (
        db.query(User)
        .options(selectinload(User.roles))
        .filter(User.id == user_id)
        .first()
    )
    if user is None:
        raise NotFoundError(f"User {user_id} not found")
    return user


def find_user_id_by_email(
    db: Session, email: str, exclude_user_id: int | None = None
) -> int | None:
    query = db.query(User.id).filter(User.email == email.lower())
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    row = query.first()
    return row[0] if row else None


def find_user_id_by_username(
    db: Session, username: str, exclude_user_id: int | None = None
) -> int | None:
    query = db.query(User.id).filter(User.username == username.lower())
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    row = query.first()
    return row[0] if row else None


def ensure_unique_identity(
    db: Session,
    email: str,
    username: str,
    messages: ConflictMessages,
    exclude_user_id: int | None = None,
) -> None:
    """
    Raise ConflictError if email or username belongs to another user.

    Email is checked first; username is not checked once email conflicts.
    """
    if find_user_id_by_email(db, email, exclude_user_id) is not None:
        raise ConflictError.for_field("email", messages.email)
    if find_user_id_by_username(db, username, exclude_user_id) is not None:
        raise ConflictError.for_field("username", messages.username)


def replace_user_roles(db: Session, user: User, role_names: Iterable[str]) -> None:
    """
    Set the user's roles to exactly role_names (clear then set).

    An empty iterable removes every role. Unknown names raise FormValidationError
    before anything changes. Not committed here.
    """
    roles = resolve_roles(db, role_names)
    user.roles = roles


def _commit_or_conflict(
    db: Session,
    form: UserCreateForm | UserEditForm,
    messages: ConflictMessages,
    exclude_user_id: int | None,
) -> None:
    """
    Commit; on a constraint failure, roll back and report it against a field.

    A concurrent duplicate email/username maps to ConflictError, a role deleted
    since it was resolved maps to the 'roles' field. Anything else is reported
    against 'form' so the request still ends in a 400.
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Commit rejected by the database: %s", e.orig)
        ensure_unique_identity(db, form.email, form.username, messages, exclude_user_id)
        resolve_roles(db, form.roles)
        raise FormValidationError.for_field(
            "form", "The user could not be saved; please try again"
        ) from e


def create_user(db: Session, form: UserCreateForm) -> User:
    """
    Create a user, its password credential and role associations in one commit.

    email and username are stored lowercase; the password is stored only as a hash.
    """
    ensure_unique_identity(db, form.email, form.username, CREATE_CONFLICTS)
    roles = resolve_roles(db, form.roles)

    user = User(
        email=form.email.lower(),
        username=form.username.lower(),
        name=form.name,
        password=Password(hash=hash_password(form.password)),
        roles=roles,
    )
    db.add(user)
    _commit_or_conflict(db, form, CREATE_CONFLICTS, exclude_user_id=None)
    db.refresh(user)
    logger.info(
        "Created user id=%s username=%r roles=%s",
        user.id,
        user.username,
        user.role_names,
    )
    return user


def update_user(db: Session, user_id: int, form: UserEditForm) -> User:
    """Overwrite a user's profile fields and replace its full role set."""
    user = get_user(db, user_id)
    ensure_unique_identity(
        db, form.email, form.username, EDIT_CONFLICTS, exclude_user_id=user.id
    )
    replace_user_roles(db, user, form.roles)
    user.email = form.email.lower()
    user.username = form.username.lower()
    user.name = form.name
    _commit_or_conflict(db, form, EDIT_CONFLICTS, exclude_user_id=user_id)
    db.refresh(user)
    logger.info(
        "Updated user id=%s username=%r roles=%s",
        user.id,
        user.username,
        user.role_names,
    )
    return user
