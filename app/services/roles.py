"""Role lookups, creation and deletion."""

import logging
from collections.abc import Iterable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models import Role
from app.services.errors import ConflictError, FormValidationError, ReservedRoleError

logger = logging.getLogger(__name__)

SYSTEM_ROLES = ("admin", "user")
ROLE_NAME_MAX_LEN = 64

# Form field that role errors are reported against.
ROLE_FIELD = "role"


def normalize_role_name(raw: str | None) -> str:
    return (raw or "").strip().lower()


def list_roles(db: Session) -> list[Role]:
    """All roles ordered by name."""
    return db.query(Role).order_by(Role.name).all()


def get_role(db: Session, name: str) -> Role | None:
    return db.query(Role).filter(Role.name == name).first()


def resolve_roles(db: Session, names: Iterable[str]) -> list[Role]:
    """
    Load Role rows for the given names, keeping submission order and dropping duplicates.

    Raises FormValidationError on the 'roles' field if any name has no row.
    """
    wanted = list(dict.fromkeys(names))
    if not wanted:
        return []
    found = {role.name: role for role in db.query(Role).filter(Role.name.in_(wanted)).all()}
    missing = [name for name in wanted if name not in found]
    if missing:
        raise FormValidationError({"roles": [f"Unknown role: {name}" for name in missing]})
    return [found[name] for name in wanted]


def ensure_system_roles(db: Session) -> list[str]:
    """Create any missing system roles. Returns the names that were created."""
    existing = {
        name for (name,) in db.query(Role.name).filter(Role.name.in_(SYSTEM_ROLES)).all()
    }
    created = [name for name in SYSTEM_ROLES if name not in existing]
    for name in created:
        db.add(Role(name=name))
    if created:
        db.commit()
        logger.info("Seeded system roles: %s", ", ".join(created))
    return created


def system_roles_seeded(db: Session) -> bool:
    return db.query(Role).filter(Role.name.in_(SYSTEM_ROLES)).count() == len(SYSTEM_ROLES)


def create_role(db: Session, raw_name: str | None) -> Role:
    """
    Create a role from a submitted name. The name is stored lowercase.

    Raises FormValidationError for an empty or overlong name and ConflictError
    when a role with the normalized name exists.
    """
    name = normalize_role_name(raw_name)
    if not name:
        raise FormValidationError.for_field(ROLE_FIELD, "Role name is required")
    if len(name) > ROLE_NAME_MAX_LEN:
        raise FormValidationError.for_field(ROLE_FIELD, "Role name is too long")
    if get_role(db, name) is not None:
        raise ConflictError.for_field(ROLE_FIELD, "This role already exists")

    role = Role(name=name)
    db.add(role)
    try:
        db.commit()
    except IntegrityError as e:
        # Concurrent insert of the same name won the unique constraint.
        db.rollback()
        raise ConflictError.for_field(ROLE_FIELD, "This role already exists") from e
    db.refresh(role)
    logger.info("Created role %r (id=%s)", role.name, role.id)
    return role


def delete_role(db: Session, raw_name: str | None) -> str:
    """
    Delete a role by name (case-insensitive) along with its user associations.

    System roles are never deleted. Returns the deleted role's name.
    """
    name = normalize_role_name(raw_name)
    if not name:
        raise FormValidationError.for_field(ROLE_FIELD, "Role name is required")
    if name in SYSTEM_ROLES:
        raise ReservedRoleError.for_field(ROLE_FIELD, "Cannot delete system roles")

    role = get_role(db, name)
    if role is None:
        raise FormValidationError.for_field(ROLE_FIELD, "This role does not exist")

    holders = len(role.users)
    db.delete(role)
    db.commit()
    if holders:
        logger.info("Deleted role %r; removed it from %s user(s)", name, holders)
    else:
        logger.info("Deleted role %r", name)
    return name
