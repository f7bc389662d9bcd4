"""
Marketplace listing model: want-to-sell, want-to-buy and want-to-trade posts.
"""
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from humidor_club.db.base import Base

if TYPE_CHECKING:
    from humidor_club.models.catalog import Cigar
    from humidor_club.models.humidor import HumidorItem
    from humidor_club.models.user import User


class ListingType(str, Enum):
    """Kind of marketplace post."""
    WTS = "WTS"  # Want to sell
    WTB = "WTB"  # Want to buy
    WTT = "WTT"  # Want to trade


class ListingStatus(str, Enum):
    """Lifecycle status of a listing."""
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    PENDING = "PENDING"      # Set out-of-band while a deal is being closed
    SOLD = "SOLD"
    WITHDRAWN = "WITHDRAWN"  # Owner removed it; rows are never deleted
    FROZEN = "FROZEN"        # Set by moderators


class Listing(Base):
    """A member's marketplace post, optionally backed by a humidor item."""

    __tablename__ = "listings"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    cigar_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("cigars.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    humidor_item_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("humidor_items.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    type: Mapped[ListingType] = mapped_column(
        SQLEnum(ListingType, native_enum=False, length=3),
        nullable=False,
        index=True,
    )
    status: Mapped[ListingStatus] = mapped_column(
        SQLEnum(ListingStatus, native_enum=False, length=20),
        default=ListingStatus.DRAFT,
        nullable=False,
        index=True,
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    qty: Mapped[int] = mapped_column(Integer, nullable=False)
    condition: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Pricing
    price_cents: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    currency: Mapped[str] = mapped_column(String(3), default="USD", nullable=False)

    # Logistics
    region: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    meet_up_only: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    will_ship: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    image_urls: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    view_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    sold_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="listings")
    cigar: Mapped[Optional["Cigar"]] = relationship("Cigar")
    humidor_item: Mapped[Optional["HumidorItem"]] = relationship("HumidorItem")

    __table_args__ = (
        CheckConstraint("qty > 0", name="qty_positive"),
        CheckConstraint(
            "type <> 'WTS' OR (price_cents IS NOT NULL AND price_cents > 0)",
            name="wts_requires_price",
        ),
        Index("ix_listings_status_published", "status", "published_at"),
    )

    def __repr__(self) -> str:
        return f"<Listing {self.type} {self.status} qty={self.qty}>"
