"""In-memory SQLite database shared by the data-access and endpoint tests."""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.models import Base
from app.schemas.admin import UserCreateForm
from app.services.accounts import create_user
from app.services.roles import ensure_system_roles


def make_database() -> tuple[Engine, sessionmaker]:
    """Create a fresh schema in a single shared in-memory connection, with system roles seeded."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record) -> None:
        dbapi_connection.execute("PRAGMA foreign_keys=ON")

    Base.metadata.create_all(engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = factory()
    try:
        ensure_system_roles(db)
    finally:
        db.close()
    return engine, factory


def add_user(
    db: Session,
    email: str = "someone@steward.io",
    username: str = "someone",
    password: str = "validpass123",
    name: str = "Some One",
    roles: list[str] | None = None,
):
    """Create a user through the service layer."""
    form = UserCreateForm(
        email=email,
        username=username,
        password=password,
        name=name,
        roles=["user"] if roles is None else roles,
    )
    return create_user(db, form)
