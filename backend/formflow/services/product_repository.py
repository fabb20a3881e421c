"""Product Repository — SQLAlchemy adapter that commits a product draft in one transaction.

Invariants:
    - save() writes the product and all variant changes in a single commit
    - On any SQLAlchemy failure the transaction is rolled back and PersistenceError raised
    - Variants marked for destruction are deleted (update) or never created (create);
      an unknown id on a destroyed item is not an error
    - A product deleted after its update flow started fails as PersistenceError
    - Existing variants not mentioned in the draft are left untouched
    - find_by_id() returns a plain dict (core never sees ORM objects)

Design Decisions:
    - IntegrityError mapped to PersistenceError, not DatabaseError: a duplicate sku
      is the user's to fix by resubmitting the final step, not a 5xx
    - Only a violation of uq_products_sku is reported as a duplicate sku
    - Explicit ids for new rows: the id is known before flush, so commit logs carry it
"""

import logging
import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from formflow.core.domain_types import ID_FIELD, EntityId, FieldSet
from formflow.core.errors import ErrorContext, PersistenceError
from formflow.core.field_set import is_blank, marked_for_destruction, normalize_nested
from formflow.core.rules import to_decimal
from formflow.models.product import Product
from formflow.models.product_variant import ProductVariant

logger = logging.getLogger(__name__)


class SqlProductRepository:
    """EntityRepository for the product form."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def find_by_id(self, entity_id: EntityId) -> dict[str, Any] | None:
        product = await self._get(entity_id)
        return product_to_dict(product) if product else None

    async def save(
        self, draft: FieldSet, entity_id: EntityId | None = None,
    ) -> EntityId:
        """Create a product from draft, or overwrite product entity_id with it."""
        ctx = ErrorContext(entity_id=str(entity_id) if entity_id else None)
        try:
            if entity_id is None:
                product = Product(id=uuid.uuid4())
                self._db.add(product)
            else:
                product = await self._get(entity_id)
                if product is None:
                    raise PersistenceError(
                        "Product could not be saved: it no longer exists", ctx,
                    )
            _apply_attributes(product, draft)
            if "variants" in draft:
                _sync_variants(product, normalize_nested(draft["variants"]), ctx)
            await self._db.commit()
        except IntegrityError as e:
            await self._db.rollback()
            logger.warning(
                f"Product commit violated a constraint: {e.orig}",
                extra={"entity_id": ctx.entity_id, "error_code": "PERSISTENCE_ERROR"},
            )
            raise PersistenceError(_integrity_message(e), ctx)
        except SQLAlchemyError as e:
            await self._db.rollback()
            logger.error(f"Product commit failed: {e}", exc_info=True)
            raise PersistenceError("Product could not be saved", ctx)
        except PersistenceError:
            await self._db.rollback()
            raise
        return EntityId(product.id)

    async def _get(self, entity_id: EntityId) -> Product | None:
        result = await self._db.execute(
            select(Product).where(Product.id == entity_id),
        )
        return result.scalar_one_or_none()


# --- Mapping helpers ----------------------------------------------------------

def _apply_attributes(product: Product, draft: FieldSet) -> None:
    product.kind = str(draft["kind"]).strip()
    product.price = to_decimal(draft["price"])
    product.name = _optional_str(draft.get("name"))
    product.sku = _optional_str(draft.get("sku"))


def _sync_variants(
    product: Product, items: list[dict], ctx: ErrorContext,
) -> None:
    existing = {str(v.id): v for v in product.variants}
    for position, item in enumerate(items):
        item_id = item.get(ID_FIELD)
        variant = None if is_blank(item_id) else existing.get(str(item_id))
        if marked_for_destruction(item):
            if variant is not None:
                product.variants.remove(variant)
            continue
        if not is_blank(item_id) and variant is None:
            raise PersistenceError(
                f"Product could not be saved: variant {item_id} no longer exists", ctx,
            )
        if variant is None:
            variant = ProductVariant(id=uuid.uuid4())
            product.variants.append(variant)
        variant.name = str(item["name"]).strip()
        variant.stock = _optional_int(item.get("stock"))
        variant.position = position


_SKU_CONSTRAINT_MARKERS = ("uq_products_sku", "products.sku")


def _integrity_message(error: IntegrityError) -> str:
    detail = str(error.orig)
    if any(marker in detail for marker in _SKU_CONSTRAINT_MARKERS):
        return "Product could not be saved: a product with this sku already exists"
    return "Product could not be saved: it violates a data constraint"


def _optional_str(value: Any) -> str | None:
    return None if is_blank(value) else str(value).strip()


def _optional_int(value: Any) -> int | None:
    if is_blank(value):
        return None
    number = to_decimal(value)
    return int(number) if number is not None else None


def product_to_dict(product: Product) -> dict[str, Any]:
    return {
        "id": str(product.id),
        "kind": product.kind,
        "name": product.name,
        "price": product.price,
        "sku": product.sku,
        "variants": [
            {"id": str(v.id), "name": v.name, "stock": v.stock}
            for v in product.variants
        ],
        "created_at": product.created_at,
        "updated_at": product.updated_at,
    }
