from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
import logging
import uuid
from datetime import date
from typing import List, Optional

from invoicedesk.models.quotation import Quotation as QuotationModel, QuotationItem as QuotationItemModel
from invoicedesk.models.invoice import Invoice as InvoiceModel
from invoicedesk.models.organization import Organization as OrganizationModel
from invoicedesk.schemas.invoice import InvoiceCreate, InvoiceItemCreate
from invoicedesk.schemas.quotation import (
    QuotationCreate,
    QuotationUpdate,
    QuotationItemCreate,
    QuotationStatusEnum,
)
from invoicedesk.services.invoice_status import round_currency
from invoicedesk.services.invoice_totals import calculate_totals, line_item_total, totals_from_subtotal
from invoicedesk.crud import crud_audit_log, crud_invoice
from invoicedesk.crud.crud_invoice import QUOTATION_SEQUENCE, _check_customer

logger = logging.getLogger(__name__)


def _build_items(items_in: List[QuotationItemCreate]) -> List[QuotationItemModel]:
    return [
        QuotationItemModel(
            description=item.description,
            quantity=item.quantity,
            unit=item.unit,
            unit_price=item.unit_price,
            discount=item.discount,
            total=line_item_total(item.quantity, item.unit_price, item.discount),
            sort_order=index,
        )
        for index, item in enumerate(items_in)
    ]

def _apply_totals(db_obj: QuotationModel) -> None:
    totals = calculate_totals(
        [(i.quantity, i.unit_price, i.discount) for i in db_obj.items], db_obj.discount, db_obj.tax
    )
    db_obj.subtotal = totals.subtotal
    db_obj.discount = totals.discount
    db_obj.tax = totals.tax
    db_obj.total = totals.total

def _pin_totals(db_obj: QuotationModel, item_totals: List[float]) -> None:
    # Items carry amounts already agreed elsewhere instead of quantity * unit_price
    for item, amount in zip(db_obj.items, item_totals):
        item.total = max(0.0, round_currency(amount))
    totals = totals_from_subtotal(sum(item.total for item in db_obj.items), db_obj.discount, db_obj.tax)
    db_obj.subtotal = totals.subtotal
    db_obj.discount = totals.discount
    db_obj.tax = totals.tax
    db_obj.total = totals.total

async def get_quotation(db: AsyncSession, quotation_id: uuid.UUID) -> Optional[QuotationModel]:
    result = await db.execute(select(QuotationModel).filter(QuotationModel.id == quotation_id))
    return result.scalars().first()

async def get_quotations(
    db: AsyncSession, *, organization_id: uuid.UUID,
    status: Optional[QuotationStatusEnum] = None, customer_id: Optional[uuid.UUID] = None,
    search: Optional[str] = None, skip: int = 0, limit: int = 100
) -> List[QuotationModel]:
    query = select(QuotationModel).filter(QuotationModel.organization_id == organization_id)
    if status: query = query.filter(QuotationModel.status == status)
    if customer_id: query = query.filter(QuotationModel.customer_id == customer_id)
    if search: query = query.filter(QuotationModel.quotation_number.ilike(f"%{search.strip()}%"))
    query = query.order_by(QuotationModel.quotation_date.desc(), QuotationModel.quotation_number.desc())
    result = await db.execute(query.offset(skip).limit(limit))
    return result.scalars().all()

async def build_quotation(
    db: AsyncSession, *, quotation_in: QuotationCreate, organization: OrganizationModel,
    created_by: Optional[uuid.UUID], item_totals: Optional[List[float]] = None,
) -> QuotationModel:
    """
    Stage a new quotation and its audit entry; the caller commits.
    """
    if quotation_in.customer_id:
        await _check_customer(db, customer_id=quotation_in.customer_id, organization_id=organization.id)

    quotation_number = await crud_invoice.issue_next_number(db, organization=organization, kind=QUOTATION_SEQUENCE)
    db_obj = QuotationModel(
        **quotation_in.model_dump(exclude={"items", "organization_id"}),
        organization_id=organization.id,
        quotation_number=quotation_number,
        status=QuotationStatusEnum.PENDING,
        created_by=created_by,
        items=_build_items(quotation_in.items),
    )
    if item_totals is None:
        _apply_totals(db_obj)
    else:
        _pin_totals(db_obj, item_totals)
    db.add(db_obj)
    await db.flush()

    crud_audit_log.add_entry(
        db, organization_id=organization.id, user_id=created_by, action="quotation.created",
        entity_type="quotation", entity_id=db_obj.id,
        details={"quotation_number": quotation_number, "total": db_obj.total},
    )
    return db_obj

async def create_quotation(
    db: AsyncSession, *, quotation_in: QuotationCreate, organization: OrganizationModel, created_by: Optional[uuid.UUID]
) -> QuotationModel:
    db_obj = await build_quotation(db, quotation_in=quotation_in, organization=organization, created_by=created_by)
    await db.commit()
    await db.refresh(db_obj)
    return db_obj

async def update_quotation(
    db: AsyncSession, *, db_obj: QuotationModel, quotation_in: QuotationUpdate
) -> QuotationModel:
    update_data = quotation_in.model_dump(exclude_unset=True, exclude={"items"})

    if update_data.get("customer_id") and update_data["customer_id"] != db_obj.customer_id:
        await _check_customer(db, customer_id=update_data["customer_id"], organization_id=db_obj.organization_id)
    for field in ("discount", "tax"):
        if field in update_data and update_data[field] is None:
            update_data.pop(field)

    for field, value in update_data.items():
        setattr(db_obj, field, value)

    if quotation_in.items is not None:
        db_obj.items = _build_items(quotation_in.items)

    _apply_totals(db_obj)
    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    return db_obj

async def update_status(
    db: AsyncSession, *, db_obj: QuotationModel, status: QuotationStatusEnum, user_id: Optional[uuid.UUID] = None
) -> QuotationModel:
    previous = db_obj.status
    db_obj.status = status
    db.add(db_obj)
    crud_audit_log.add_entry(
        db, organization_id=db_obj.organization_id, user_id=user_id, action="quotation.status_changed",
        entity_type="quotation", entity_id=db_obj.id,
        details={"from": previous.value, "to": status.value},
    )
    await db.commit()
    await db.refresh(db_obj)
    return db_obj

async def delete_quotation(db: AsyncSession, *, db_obj: QuotationModel) -> QuotationModel:
    await db.delete(db_obj)
    await db.commit()
    return db_obj

async def convert_to_invoice(
    db: AsyncSession, *, db_obj: QuotationModel, organization: OrganizationModel, user_id: Optional[uuid.UUID]
) -> InvoiceModel:
    """
    Create an invoice from the quotation and mark the quotation accepted.
    Raises ValueError for rejected or already converted quotations and for
    quotations without a customer.
    """
    if db_obj.status == QuotationStatusEnum.REJECTED:
        raise ValueError("A rejected quotation cannot be converted to an invoice.")
    if db_obj.invoice_id:
        raise ValueError("This quotation has already been converted to an invoice.")
    if not db_obj.customer_id:
        raise ValueError("Assign a customer before converting the quotation.")

    invoice_in = InvoiceCreate(
        organization_id=organization.id,
        customer_id=db_obj.customer_id,
        invoice_date=date.today(),
        discount=db_obj.discount,
        tax=db_obj.tax,
        notes=db_obj.notes,
        items=[
            InvoiceItemCreate(
                description=item.description,
                quantity=item.quantity,
                unit=item.unit,
                unit_price=item.unit_price,
                discount=item.discount,
            )
            for item in db_obj.items
        ],
    )
    invoice = await crud_invoice.build_invoice(
        db, invoice_in=invoice_in, organization=organization, created_by=user_id,
        item_totals=[item.total for item in db_obj.items],
    )

    # Invoice, number and quotation link land in one commit
    db_obj.status = QuotationStatusEnum.ACCEPTED
    db_obj.invoice_id = invoice.id
    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    await db.refresh(invoice)
    logger.info(f"Quotation {db_obj.quotation_number} converted to invoice {invoice.invoice_number}")
    return invoice
