"""ORM Models — SQLAlchemy declarative models for committed form entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Rows exist only for committed flows (no draft rows)

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from formflow.models.product import Product  # noqa: F401
from formflow.models.product_variant import ProductVariant  # noqa: F401
