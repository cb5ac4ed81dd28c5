"""Database models for merchants and their connected stores."""

from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey, Index, Boolean
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class User(Base):
    """Merchant account owning one or more stores."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=True)
    # Timestamps
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    stores = relationship("Store", back_populates="user", cascade="all, delete-orphan")

    def to_dict(self):
        """Convert user to dictionary."""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class Store(Base):
    """
    Shopify store connected by a user.

    Access token and API key are stored as cipher envelopes
    (see app.core.crypto); plaintext never reaches this table.
    """

    __tablename__ = "stores"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    shopify_domain = Column(String(255), unique=True, nullable=False)
    encrypted_access_token = Column(Text, nullable=False)
    encrypted_api_key = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", back_populates="stores")

    __table_args__ = (
        Index("idx_store_user_active", "user_id", "is_active"),
    )

    def to_dict(self):
        """Convert store to dictionary without credential columns."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "shopify_domain": self.shopify_domain,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
