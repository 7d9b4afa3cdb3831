from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func
import logging
import uuid
from typing import Any, Iterable, List, Optional

from invoicedesk.core.errors import CostingError
from invoicedesk.models.costing import CostingTemplate as CostingTemplateModel
from invoicedesk.schemas.costing_template import CostingTemplateCreate, CostingTemplateUpdate
from invoicedesk.services.costing import CostingRowDraft, can_save_as_template

logger = logging.getLogger(__name__)


def _drafts(rows: Iterable[Any]) -> List[CostingRowDraft]:
    # line_total is recomputed from quantity and price
    return [CostingRowDraft.from_source(row) for row in rows]

async def get_template(db: AsyncSession, template_id: uuid.UUID) -> Optional[CostingTemplateModel]:
    result = await db.execute(select(CostingTemplateModel).filter(CostingTemplateModel.id == template_id))
    return result.scalars().first()

async def get_template_by_name(db: AsyncSession, *, organization_id: uuid.UUID, name: str) -> Optional[CostingTemplateModel]:
    result = await db.execute(
        select(CostingTemplateModel)
        .filter(CostingTemplateModel.organization_id == organization_id)
        .filter(func.lower(CostingTemplateModel.name) == name.strip().lower())
    )
    return result.scalars().first()

async def get_templates(
    db: AsyncSession, *, organization_id: uuid.UUID, search: Optional[str] = None, skip: int = 0, limit: int = 100
) -> List[CostingTemplateModel]:
    query = select(CostingTemplateModel).filter(CostingTemplateModel.organization_id == organization_id)
    if search:
        query = query.filter(CostingTemplateModel.name.ilike(f"%{search.strip()}%"))
    query = query.order_by(CostingTemplateModel.name).offset(skip).limit(limit)
    result = await db.execute(query)
    return result.scalars().all()

async def create_template(
    db: AsyncSession, *, organization_id: uuid.UUID, name: str, rows: Iterable[Any],
    description: Optional[str] = None, created_by: Optional[uuid.UUID] = None,
) -> CostingTemplateModel:
    """
    Save rows as a named template. Raises CostingError when there is nothing
    worth saving and ValueError for a blank or duplicate name.
    """
    drafts = _drafts(rows)
    if not can_save_as_template(drafts):
        raise CostingError("At least one costing item is required to save")
    name = (name or "").strip()
    if not name:
        raise ValueError("Template name is required")
    if await get_template_by_name(db, organization_id=organization_id, name=name):
        raise ValueError(f"A costing template named '{name}' already exists.")

    db_obj = CostingTemplateModel(
        organization_id=organization_id,
        name=name,
        description=description,
        items=[d.to_template_item() for d in drafts],
        created_by=created_by,
    )
    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    logger.info(f"Costing template '{name}' saved with {db_obj.item_count} rows")
    return db_obj

async def create_template_from_schema(
    db: AsyncSession, *, template_in: CostingTemplateCreate, created_by: Optional[uuid.UUID] = None
) -> CostingTemplateModel:
    return await create_template(
        db,
        organization_id=template_in.organization_id,
        name=template_in.name,
        description=template_in.description,
        rows=template_in.items,
        created_by=created_by,
    )

async def update_template(
    db: AsyncSession, *, db_obj: CostingTemplateModel, obj_in: CostingTemplateUpdate
) -> CostingTemplateModel:
    update_data = obj_in.model_dump(exclude_unset=True)

    if update_data.get("name") and update_data["name"].lower() != db_obj.name.lower():
        existing = await get_template_by_name(db, organization_id=db_obj.organization_id, name=update_data["name"])
        if existing and existing.id != db_obj.id:
            raise ValueError(f"A costing template named '{update_data['name']}' already exists.")
    elif "name" in update_data and not update_data["name"]:
        update_data.pop("name")

    if "items" in update_data:
        drafts = _drafts(obj_in.items or [])
        if not can_save_as_template(drafts):
            raise CostingError("At least one costing item is required to save")
        update_data["items"] = [d.to_template_item() for d in drafts]

    for field, value in update_data.items():
        setattr(db_obj, field, value)

    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    return db_obj

async def delete_template(db: AsyncSession, *, db_obj: CostingTemplateModel) -> CostingTemplateModel:
    await db.delete(db_obj)
    await db.commit()
    return db_obj
