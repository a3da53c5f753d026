"""ORM model for user accounts (authentication and RBAC)."""

import enum

from sqlalchemy import Column, DateTime, Enum, Integer, String, func

from cleantask.models.base import Base


class Role(str, enum.Enum):
    """The two account roles. Every role check goes through this enum."""

    REGULAR = "usuario"
    ADMIN = "admin"


class Account(Base):
    """
    Account used for JWT authentication and role-based access control.

    email is stored lower-cased so the unique index is case-insensitive.
    """

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        Enum(
            Role,
            name="account_role",
            native_enum=False,
            length=32,
            values_callable=lambda roles: [r.value for r in roles],
        ),
        nullable=False,
        default=Role.REGULAR,
    )
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

    def __repr__(self) -> str:
        return f"<Account id={self.id} email={self.email!r} role={self.role.value if self.role else None}>"
