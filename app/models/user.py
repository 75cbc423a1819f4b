"""ORM models for user accounts and their password credential."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship

from app.models.base import Base
from app.models.role import user_roles


class User(Base):
    """
    User account managed from the admin console.

    email and username are stored lowercase; uniqueness is case-insensitive.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    password = relationship(
        "Password",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
    roles = relationship(
        "Role",
        secondary=user_roles,
        back_populates="users",
        order_by="Role.name",
    )

    @property
    def role_names(self) -> list[str]:
        return [role.name for role in self.roles]


class Password(Base):
    """Password hash owned by exactly one user. Never holds plain text."""

    __tablename__ = "passwords"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    hash = Column(String(255), nullable=False)

    user = relationship("User", back_populates="password")
