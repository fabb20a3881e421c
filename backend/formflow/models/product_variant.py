"""ProductVariant ORM — nested association edited through the pricing step.

Invariants:
    - Always belongs to a Product (product_id FK, cascade delete)
    - position preserves the order the variants were submitted in
"""

import uuid

from sqlalchemy import String, Integer, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from formflow.db.base import Base


class ProductVariant(Base):
    """A named variant of a product with optional stock."""
    __tablename__ = "product_variants"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(80), nullable=False)
    stock: Mapped[int | None] = mapped_column(Integer, nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    product: Mapped["Product"] = relationship(
        "Product", back_populates="variants",
    )
