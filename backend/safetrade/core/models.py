"""
ORM models for deal agreement persistence.

WHAT: SQLAlchemy models for safe zones, deal agreements and privacy log
WHY: The collaborator side of the meeting agreement wizard needs durable state
HOW: Declarative models with constraints, relationships, and indexes
"""

from datetime import datetime
from uuid import uuid4
from sqlalchemy import (
    Column, String, Float, Boolean, DateTime, JSON,
    ForeignKey, CheckConstraint, Index, Enum as SQLEnum
)
from sqlalchemy.orm import relationship
import enum

from .database import Base


class DealStatus(str, enum.Enum):
    """Deal agreement status values."""
    PENDING = "pending"
    AGREED = "agreed"
    SCHEDULED = "scheduled"


class SafeZone(Base):
    """
    SafeZone table - curated public meeting places.

    WHAT: Police stations, malls, parking lots and other monitored locations
    WHY: Offered to both parties as the meeting point for a sale
    HOW: Filtered by city/ZIP/type; only verified zones are listed
    """
    __tablename__ = "safe_zones"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    name = Column(String(255), nullable=False)
    address = Column(String(500), nullable=False)
    city = Column(String(100), nullable=False)
    state = Column(String(50), nullable=True)
    zip_code = Column(String(20), nullable=True)
    type = Column(String(50), nullable=False)
    features = Column(JSON, nullable=False, default=list)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    verified = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_safe_zones_city", "city", "zip_code"),
    )

    def __repr__(self):
        return f"<SafeZone(id={self.id}, name={self.name}, type={self.type})>"


class DealAgreement(Base):
    """
    DealAgreement table - the shared record both parties agree through.

    WHAT: Per-conversation agreement flags, price and meeting details
    WHY: Each party's wizard runs independently; this is their only shared state
    HOW: One row per conversation; meeting fields are revealed once both agree
    """
    __tablename__ = "deal_agreements"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    conversation_id = Column(String(100), nullable=False, unique=True)
    listing_id = Column(String(100), nullable=False)
    buyer_id = Column(String(100), nullable=False)
    seller_id = Column(String(100), nullable=False)

    agreed_price = Column(Float, nullable=True)
    original_price = Column(Float, nullable=True)

    buyer_agreed = Column(Boolean, nullable=False, default=False)
    buyer_agreed_at = Column(DateTime, nullable=True)
    seller_agreed = Column(Boolean, nullable=False, default=False)
    seller_agreed_at = Column(DateTime, nullable=True)

    privacy_revealed = Column(Boolean, nullable=False, default=False)
    privacy_revealed_at = Column(DateTime, nullable=True)
    deal_status = Column(SQLEnum(DealStatus), nullable=False, default=DealStatus.PENDING)

    safe_zone_id = Column(String(36), ForeignKey("safe_zones.id", ondelete="SET NULL"), nullable=True)
    custom_meeting_location = Column(String(500), nullable=True)
    meeting_datetime = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("agreed_price IS NULL OR agreed_price > 0", name="check_agreed_price_positive"),
        CheckConstraint(
            "safe_zone_id IS NULL OR custom_meeting_location IS NULL",
            name="check_single_meeting_location"
        ),
    )

    safe_zone = relationship("SafeZone")
    privacy_logs = relationship("PrivacyProtectionLog", back_populates="deal_agreement", cascade="all, delete-orphan")

    @property
    def both_agreed(self) -> bool:
        return bool(self.buyer_agreed and self.seller_agreed)

    def __repr__(self):
        return (
            f"<DealAgreement(conversation={self.conversation_id}, buyer_agreed={self.buyer_agreed}, "
            f"seller_agreed={self.seller_agreed}, status={self.deal_status})>"
        )


class PrivacyProtectionLog(Base):
    """
    PrivacyProtectionLog table - audit trail of identity reveals.

    WHAT: One row per party whose details were revealed to the other
    WHY: Names stay hidden until both parties agree; reveals must be traceable
    HOW: Foreign key to DealAgreement with CASCADE delete
    """
    __tablename__ = "privacy_protection_log"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    deal_agreement_id = Column(String(36), ForeignKey("deal_agreements.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(100), nullable=False)
    data_type = Column(String(50), nullable=False)
    revealed_to = Column(String(100), nullable=False)
    reason = Column(String(100), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    deal_agreement = relationship("DealAgreement", back_populates="privacy_logs")

    def __repr__(self):
        return f"<PrivacyProtectionLog(user={self.user_id}, revealed_to={self.revealed_to})>"
