"""Product Routes — read committed products.

Invariants:
    - Only committed entities exist to be read (no draft rows)
    - Writes happen exclusively through flows
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from formflow.core.domain_types import EntityId
from formflow.core.errors import ErrorContext, ResourceNotFoundError
from formflow.infrastructure.database import get_db
from formflow.schemas.flow import ProductResponse
from formflow.services.product_repository import SqlProductRepository

router = APIRouter(prefix="/api/v1/products", tags=["products"])


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: UUID, db: AsyncSession = Depends(get_db)):
    product = await SqlProductRepository(db).find_by_id(EntityId(product_id))
    if product is None:
        raise ResourceNotFoundError(
            "Product", str(product_id), ErrorContext(entity_id=str(product_id)),
        )
    return product
