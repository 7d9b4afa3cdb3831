from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func
from datetime import date, datetime, timezone
from typing import Dict, Optional
import uuid

from invoicedesk.models.subscription import Subscription as SubscriptionModel
from invoicedesk.models.organization import OrganizationMember as MemberModel
from invoicedesk.models.customer import Customer as CustomerModel
from invoicedesk.models.invoice import Invoice as InvoiceModel
from invoicedesk.models.quotation import Quotation as QuotationModel
from invoicedesk.schemas.subscription import LimitTypeEnum, SubscriptionUpdate
from invoicedesk.services import plans


async def get_subscription(db: AsyncSession, *, organization_id: uuid.UUID) -> SubscriptionModel | None:
    result = await db.execute(
        select(SubscriptionModel).filter(SubscriptionModel.organization_id == organization_id)
    )
    return result.scalars().first()

async def update_subscription(
    db: AsyncSession, *, db_obj: SubscriptionModel, obj_in: SubscriptionUpdate
) -> SubscriptionModel:
    update_data = obj_in.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(db_obj, field, value)

    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    return db_obj


def _month_start(today: Optional[date] = None) -> date:
    today = today or datetime.now(timezone.utc).date()
    return today.replace(day=1)

async def get_usage(
    db: AsyncSession, *, organization_id: uuid.UUID, limit_type: LimitTypeEnum, today: Optional[date] = None
) -> int:
    """
    Current usage counted against a plan limit. Invoices and quotations
    count the current calendar month only.
    """
    if limit_type == LimitTypeEnum.USERS:
        query = select(func.count(MemberModel.id)).filter(MemberModel.organization_id == organization_id)
    elif limit_type == LimitTypeEnum.CUSTOMERS:
        query = select(func.count(CustomerModel.id)).filter(CustomerModel.organization_id == organization_id)
    elif limit_type == LimitTypeEnum.INVOICES:
        query = (
            select(func.count(InvoiceModel.id))
            .filter(InvoiceModel.organization_id == organization_id)
            .filter(InvoiceModel.invoice_date >= _month_start(today))
        )
    else:
        query = (
            select(func.count(QuotationModel.id))
            .filter(QuotationModel.organization_id == organization_id)
            .filter(QuotationModel.quotation_date >= _month_start(today))
        )
    result = await db.execute(query)
    return result.scalar_one()

async def get_all_usage(db: AsyncSession, *, organization_id: uuid.UUID) -> Dict[LimitTypeEnum, int]:
    return {
        limit_type: await get_usage(db, organization_id=organization_id, limit_type=limit_type)
        for limit_type in LimitTypeEnum
    }

async def check_limit(
    db: AsyncSession, *, subscription: SubscriptionModel | None, organization_id: uuid.UUID, limit_type: LimitTypeEnum
) -> plans.LimitStatus:
    current = await get_usage(db, organization_id=organization_id, limit_type=limit_type)
    plan = subscription.plan if subscription else None
    return plans.check_limit(plan, limit_type, current)
