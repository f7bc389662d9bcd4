"""
Humidor model: one row per acquisition batch of a cigar owned by a member.
"""
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from humidor_club.db.base import Base

if TYPE_CHECKING:
    from humidor_club.models.catalog import Cigar
    from humidor_club.models.user import User


class HumidorItem(Base):
    """
    Cigars a member has on hand.

    ``quantity`` is what remains; smoking decrements it and increments
    ``smoked_count``. ``available_for_sale`` and ``available_for_trade`` are
    marketplace reservations carved out of ``quantity``; their sum never
    exceeds it.
    """

    __tablename__ = "humidor_items"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    cigar_id: Mapped[int] = mapped_column(
        ForeignKey("cigars.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Ledger
    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    smoked_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    available_for_sale: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    available_for_trade: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Acquisition details
    purchase_price_cents: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    purchase_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    acquired_from: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    last_smoked_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    condition: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="humidor_items")
    cigar: Mapped["Cigar"] = relationship("Cigar", back_populates="humidor_items")

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="quantity_non_negative"),
        CheckConstraint("smoked_count >= 0", name="smoked_count_non_negative"),
        CheckConstraint(
            "available_for_sale >= 0 AND available_for_trade >= 0",
            name="reservations_non_negative",
        ),
        CheckConstraint(
            "available_for_sale + available_for_trade <= quantity",
            name="reservations_within_quantity",
        ),
        Index("ix_humidor_items_user_cigar", "user_id", "cigar_id"),
    )

    def __repr__(self) -> str:
        return f"<HumidorItem user={self.user_id} cigar={self.cigar_id} qty={self.quantity}>"

    @property
    def reserved(self) -> int:
        return self.available_for_sale + self.available_for_trade
