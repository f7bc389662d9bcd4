"""
Catalog models: brands, product lines and individual cigars (vitolas).
"""
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from humidor_club.db.base import Base

if TYPE_CHECKING:
    from humidor_club.models.humidor import HumidorItem


class Brand(Base):
    """A cigar manufacturer or marque, e.g. Padrón."""

    __tablename__ = "brands"

    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    slug: Mapped[str] = mapped_column(String(220), unique=True, nullable=False)
    country: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    founded: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    logo_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    lines: Mapped[List["Line"]] = relationship("Line", back_populates="brand")

    def __repr__(self) -> str:
        return f"<Brand {self.slug}>"


class Line(Base):
    """A product line within a brand, e.g. 1964 Anniversary Series."""

    __tablename__ = "lines"

    brand_id: Mapped[int] = mapped_column(
        ForeignKey("brands.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(220), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    release_year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    discontinued: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    brand: Mapped["Brand"] = relationship("Brand", back_populates="lines")
    cigars: Mapped[List["Cigar"]] = relationship("Cigar", back_populates="line")

    __table_args__ = (
        UniqueConstraint("brand_id", "slug", name="uq_lines_brand_slug"),
    )

    def __repr__(self) -> str:
        return f"<Line {self.slug} brand={self.brand_id}>"


class Cigar(Base):
    """
    A specific vitola within a line.

    Prices are stored in cents. ``typical_street_cents`` takes precedence
    over ``msrp_cents`` wherever a catalog price is needed.
    """

    __tablename__ = "cigars"

    line_id: Mapped[int] = mapped_column(
        ForeignKey("lines.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    vitola: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    # Dimensions
    ring_gauge: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    length_inches: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    length_mm: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Blend
    wrapper: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    binder: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    filler: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    filler_tobaccos: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    strength: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    body: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    # Origin
    country: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    factory: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    # Pricing
    msrp_cents: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    typical_street_cents: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    image_urls: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    # Ratings
    avg_rating: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    total_ratings: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_by_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )

    # Relationships
    line: Mapped["Line"] = relationship("Line", back_populates="cigars")
    humidor_items: Mapped[List["HumidorItem"]] = relationship("HumidorItem", back_populates="cigar")

    __table_args__ = (
        Index("ix_cigars_line_vitola", "line_id", "vitola"),
    )

    def __repr__(self) -> str:
        return f"<Cigar {self.vitola} line={self.line_id}>"

    @property
    def catalog_price_cents(self) -> Optional[int]:
        """Street price when known, otherwise MSRP."""
        return self.typical_street_cents or self.msrp_cents or None
