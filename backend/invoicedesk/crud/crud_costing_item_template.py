from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func, or_
import uuid
from typing import List, Optional

from invoicedesk.models.costing import CostingItemTemplate as ItemTemplateModel, CostingItemTemplateRow as ItemTemplateRowModel
from invoicedesk.schemas.costing_template import (
    CostingItemTemplateCreate,
    CostingItemTemplateUpdate,
    ItemTemplateRowBase,
)
from invoicedesk.services.costing import normalize_item_key


def _build_rows(rows_in: List[ItemTemplateRowBase]) -> List[ItemTemplateRowModel]:
    return [
        ItemTemplateRowModel(
            sub_item_name=row.sub_item_name,
            description=row.description,
            default_qty=row.default_qty,
            default_price=row.default_price,
            sort_order=row.sort_order if row.sort_order is not None else index,
        )
        for index, row in enumerate(rows_in)
    ]

async def get_item_template(db: AsyncSession, template_id: uuid.UUID) -> Optional[ItemTemplateModel]:
    result = await db.execute(select(ItemTemplateModel).filter(ItemTemplateModel.id == template_id))
    return result.scalars().first()

async def get_item_templates(
    db: AsyncSession, *, organization_id: uuid.UUID, include_inactive: bool = True
) -> List[ItemTemplateModel]:
    query = select(ItemTemplateModel).filter(ItemTemplateModel.organization_id == organization_id)
    if not include_inactive:
        query = query.filter(ItemTemplateModel.is_active.is_(True))
    result = await db.execute(query.order_by(ItemTemplateModel.item_name))
    return result.scalars().all()

async def get_item_template_by_name(
    db: AsyncSession, *, organization_id: uuid.UUID, item_name: str
) -> Optional[ItemTemplateModel]:
    """
    Active template whose normalized key or lowercased name matches.
    """
    if not item_name or not item_name.strip():
        return None
    key = normalize_item_key(item_name)
    result = await db.execute(
        select(ItemTemplateModel)
        .filter(ItemTemplateModel.organization_id == organization_id)
        .filter(ItemTemplateModel.is_active.is_(True))
        .filter(or_(
            ItemTemplateModel.item_key == key,
            func.lower(ItemTemplateModel.item_name) == item_name.strip().lower(),
        ))
    )
    return result.scalars().first()

async def _key_taken(db: AsyncSession, *, organization_id: uuid.UUID, key: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
    query = (
        select(ItemTemplateModel.id)
        .filter(ItemTemplateModel.organization_id == organization_id)
        .filter(ItemTemplateModel.item_key == key)
    )
    if exclude_id:
        query = query.filter(ItemTemplateModel.id != exclude_id)
    result = await db.execute(query)
    return result.first() is not None

async def create_item_template(
    db: AsyncSession, *, template_in: CostingItemTemplateCreate, created_by: Optional[uuid.UUID] = None
) -> ItemTemplateModel:
    """
    Raises ValueError when a template for the same item name exists.
    """
    key = normalize_item_key(template_in.item_name)
    if await _key_taken(db, organization_id=template_in.organization_id, key=key):
        raise ValueError(f"An item template for '{template_in.item_name}' already exists.")

    db_obj = ItemTemplateModel(
        organization_id=template_in.organization_id,
        item_name=template_in.item_name,
        item_key=key,
        description=template_in.description,
        created_by=created_by,
        rows=_build_rows(template_in.rows),
    )
    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    return db_obj

async def update_item_template(
    db: AsyncSession, *, db_obj: ItemTemplateModel, obj_in: CostingItemTemplateUpdate
) -> ItemTemplateModel:
    """
    Rows are only replaced when they are sent.
    """
    update_data = obj_in.model_dump(exclude_unset=True, exclude={"rows"})

    if update_data.get("item_name"):
        key = normalize_item_key(update_data["item_name"])
        if await _key_taken(db, organization_id=db_obj.organization_id, key=key, exclude_id=db_obj.id):
            raise ValueError(f"An item template for '{update_data['item_name']}' already exists.")
        update_data["item_key"] = key
    else:
        update_data.pop("item_name", None)
    if update_data.get("is_active") is None:
        update_data.pop("is_active", None)

    for field, value in update_data.items():
        setattr(db_obj, field, value)

    if obj_in.rows is not None:
        db_obj.rows = _build_rows(obj_in.rows)

    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    return db_obj

async def delete_item_template(db: AsyncSession, *, db_obj: ItemTemplateModel) -> ItemTemplateModel:
    await db.delete(db_obj)
    await db.commit()
    return db_obj
