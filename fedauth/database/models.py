"""SQLAlchemy database models for fedauth."""

from datetime import datetime
import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from fedauth.database.database import Base


class UserDB(Base):
    """Database model for User."""

    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    # Lowercase email. UNIQUE so two concurrent first logins cannot both create
    # a record; NULLs (providers without email) do not collide.
    email = Column(String, nullable=True, unique=True, index=True)

    # Local accounts only. Never copied into the pydantic model.
    password_hash = Column(String, nullable=True)

    # User profile
    display_name = Column(String, nullable=True)
    picture = Column(String, nullable=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    linked_identities = relationship(
        "LinkedIdentityDB",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def linked_providers(self) -> dict:
        return {link.provider: link.provider_user_id for link in self.linked_identities}

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from fedauth.models.user import User
        return User(
            id=self.id,
            email=self.email,
            display_name=self.display_name,
            picture=self.picture,
            linked_providers=self.linked_providers(),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class LinkedIdentityDB(Base):
    """One external provider identity linked to a local user.

    Composite primary key: at most one identity per provider per user.
    """

    __tablename__ = "linked_identities"
    __table_args__ = (
        # An external identity belongs to at most one local account.
        UniqueConstraint("provider", "provider_user_id", name="uq_linked_identity_provider_user"),
    )

    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True)
    provider = Column(String, primary_key=True)  # e.g. "google"
    provider_user_id = Column(String, nullable=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    user = relationship("UserDB", back_populates="linked_identities")
