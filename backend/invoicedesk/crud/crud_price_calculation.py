from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
import logging
import uuid
from typing import List, Optional, Tuple

from invoicedesk.models.price_calculation import PriceCalculation as PriceCalculationModel
from invoicedesk.models.organization import Organization as OrganizationModel
from invoicedesk.schemas.invoice import InvoiceCreate, InvoiceItemCreate
from invoicedesk.schemas.quotation import QuotationCreate, QuotationItemCreate
from invoicedesk.schemas.price_calculation import PriceCalculationCreate, PriceCalculationUpdate
from invoicedesk.services.pricing import compute_price
from invoicedesk.crud import crud_invoice, crud_quotation
from invoicedesk.crud.crud_invoice import _check_customer

logger = logging.getLogger(__name__)


def _apply_breakdown(db_obj: PriceCalculationModel) -> None:
    breakdown = compute_price(db_obj)
    db_obj.costing_total = breakdown.costing_total
    db_obj.margin_amount = breakdown.margin_amount
    db_obj.final_price = breakdown.final_price
    db_obj.price_per_piece = breakdown.price_per_piece

async def get_price_calculation(db: AsyncSession, calculation_id: uuid.UUID) -> Optional[PriceCalculationModel]:
    result = await db.execute(select(PriceCalculationModel).filter(PriceCalculationModel.id == calculation_id))
    return result.scalars().first()

async def get_price_calculations(
    db: AsyncSession, *, organization_id: uuid.UUID, customer_id: Optional[uuid.UUID] = None,
    search: Optional[str] = None, skip: int = 0, limit: int = 100
) -> List[PriceCalculationModel]:
    query = select(PriceCalculationModel).filter(PriceCalculationModel.organization_id == organization_id)
    if customer_id: query = query.filter(PriceCalculationModel.customer_id == customer_id)
    if search: query = query.filter(PriceCalculationModel.job_description.ilike(f"%{search.strip()}%"))
    query = query.order_by(PriceCalculationModel.created_at.desc()).offset(skip).limit(limit)
    result = await db.execute(query)
    return result.scalars().all()

async def create_price_calculation(
    db: AsyncSession, *, calculation_in: PriceCalculationCreate, created_by: Optional[uuid.UUID] = None
) -> PriceCalculationModel:
    if calculation_in.customer_id:
        await _check_customer(db, customer_id=calculation_in.customer_id, organization_id=calculation_in.organization_id)

    db_obj = PriceCalculationModel(**calculation_in.model_dump(), created_by=created_by)
    _apply_breakdown(db_obj)
    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    return db_obj

async def update_price_calculation(
    db: AsyncSession, *, db_obj: PriceCalculationModel, obj_in: PriceCalculationUpdate
) -> PriceCalculationModel:
    update_data = obj_in.model_dump(exclude_unset=True)
    if update_data.get("customer_id") and update_data["customer_id"] != db_obj.customer_id:
        await _check_customer(db, customer_id=update_data["customer_id"], organization_id=db_obj.organization_id)
    for field in ("job_description", "quantity", "margin_percent"):
        if field in update_data and update_data[field] is None:
            update_data.pop(field)

    for field, value in update_data.items():
        setattr(db_obj, field, value)

    _apply_breakdown(db_obj)
    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    return db_obj

async def delete_price_calculation(db: AsyncSession, *, db_obj: PriceCalculationModel) -> PriceCalculationModel:
    await db.delete(db_obj)
    await db.commit()
    return db_obj

async def convert(
    db: AsyncSession, *, db_obj: PriceCalculationModel, target: str,
    organization: OrganizationModel, user_id: Optional[uuid.UUID]
) -> Tuple[uuid.UUID, str]:
    """
    Create a one-item quotation or invoice billed at the calculation's final
    price and link it back, in one commit. Returns the new document's id and
    number.
    """
    quantity = db_obj.quantity if db_obj.quantity and db_obj.quantity > 0 else 1
    item = dict(
        description=db_obj.job_description,
        quantity=quantity,
        unit="pcs",
        unit_price=db_obj.price_per_piece if db_obj.quantity and db_obj.quantity > 0 else db_obj.final_price,
    )
    notes = f"Job: {db_obj.job_description}"

    if target == "quotation":
        quotation = await crud_quotation.build_quotation(
            db,
            quotation_in=QuotationCreate(
                organization_id=organization.id,
                customer_id=db_obj.customer_id,
                notes=notes,
                items=[QuotationItemCreate(**item)],
            ),
            organization=organization,
            created_by=user_id,
            item_totals=[db_obj.final_price],
        )
        db_obj.quotation_id = quotation.id
        document_id, document_number = quotation.id, quotation.quotation_number
    elif target == "invoice":
        if not db_obj.customer_id:
            raise ValueError("Assign a customer before creating an invoice.")
        invoice = await crud_invoice.build_invoice(
            db,
            invoice_in=InvoiceCreate(
                organization_id=organization.id,
                customer_id=db_obj.customer_id,
                notes=notes,
                items=[InvoiceItemCreate(**item)],
            ),
            organization=organization,
            created_by=user_id,
            item_totals=[db_obj.final_price],
        )
        db_obj.invoice_id = invoice.id
        document_id, document_number = invoice.id, invoice.invoice_number
    else:
        raise ValueError(f"Unknown conversion target: {target}")

    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    logger.info(f"Price calculation {db_obj.id} converted to {target} {document_number}")
    return document_id, document_number
