from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import and_, delete, func, or_, update
import logging
import uuid
from datetime import date
from typing import List, Optional

from invoicedesk.core.config import settings
from invoicedesk.models.invoice import Invoice as InvoiceModel, InvoiceItem as InvoiceItemModel, InvoiceSequence
from invoicedesk.models.customer import Customer as CustomerModel
from invoicedesk.models.costing import InvoiceCostingItem
from invoicedesk.models.organization import Organization as OrganizationModel
from invoicedesk.models.payment import InvoicePayment
from invoicedesk.models.quotation import Quotation as QuotationModel
from invoicedesk.schemas.invoice import (
    InvoiceCreate,
    InvoiceUpdate,
    InvoiceItemCreate,
    InvoiceStatusEnum,
    InvoiceDisplayStatusEnum,
)
from invoicedesk.services.invoice_status import round_currency, stored_status
from invoicedesk.services.invoice_totals import calculate_totals, line_item_total, totals_from_subtotal
from invoicedesk.services.numbering import format_document_number
from invoicedesk.crud import crud_audit_log

logger = logging.getLogger(__name__)

INVOICE_SEQUENCE = "invoice"
QUOTATION_SEQUENCE = "quotation"


# --- Numbering ---
def _sequence_settings(organization: OrganizationModel, kind: str) -> tuple[str, int]:
    if kind == INVOICE_SEQUENCE:
        return (organization.invoice_prefix or settings.INVOICE_NUMBER_PREFIX,
                organization.invoice_starting_number or 1)
    return settings.QUOTATION_NUMBER_PREFIX, 1

async def _get_sequence(
    db: AsyncSession, *, organization_id: uuid.UUID, kind: str, for_update: bool = False
) -> Optional[InvoiceSequence]:
    query = (
        select(InvoiceSequence)
        .filter(InvoiceSequence.organization_id == organization_id)
        .filter(InvoiceSequence.kind == kind)
    )
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    return result.scalars().first()

async def _number_taken(db: AsyncSession, *, organization_id: uuid.UUID, kind: str, number: str) -> bool:
    if kind == INVOICE_SEQUENCE:
        return await invoice_number_exists(db, organization_id=organization_id, invoice_number=number)
    result = await db.execute(
        select(QuotationModel.id)
        .filter(QuotationModel.organization_id == organization_id)
        .filter(QuotationModel.quotation_number == number)
    )
    return result.first() is not None

async def _next_free(
    db: AsyncSession, *, organization_id: uuid.UUID, kind: str, prefix: str, starting_number: int, current: int
) -> tuple[int, str]:
    value = max(current + 1, starting_number)
    number = format_document_number(prefix, value)
    # Skip numbers already used manually
    while await _number_taken(db, organization_id=organization_id, kind=kind, number=number):
        value += 1
        number = format_document_number(prefix, value)
    return value, number

async def preview_next_number(db: AsyncSession, *, organization: OrganizationModel, kind: str = INVOICE_SEQUENCE) -> str:
    """
    The number the next document would get, without consuming it.
    """
    prefix, starting_number = _sequence_settings(organization, kind)
    sequence = await _get_sequence(db, organization_id=organization.id, kind=kind)
    _, number = await _next_free(
        db, organization_id=organization.id, kind=kind, prefix=prefix,
        starting_number=starting_number, current=sequence.current_sequence if sequence else 0,
    )
    return number

async def issue_next_number(db: AsyncSession, *, organization: OrganizationModel, kind: str = INVOICE_SEQUENCE) -> str:
    """
    Consume the next number. Committed together with the document using it.
    """
    prefix, starting_number = _sequence_settings(organization, kind)
    sequence = await _get_sequence(db, organization_id=organization.id, kind=kind, for_update=True)
    if sequence is None:
        sequence = InvoiceSequence(organization_id=organization.id, kind=kind, current_sequence=0)
    sequence.prefix = prefix
    sequence.starting_number = starting_number
    value, number = await _next_free(
        db, organization_id=organization.id, kind=kind, prefix=prefix,
        starting_number=starting_number, current=sequence.current_sequence or 0,
    )
    sequence.current_sequence = value
    db.add(sequence)
    return number

async def invoice_number_exists(
    db: AsyncSession, *, organization_id: uuid.UUID, invoice_number: str, exclude_id: Optional[uuid.UUID] = None
) -> bool:
    query = (
        select(InvoiceModel.id)
        .filter(InvoiceModel.organization_id == organization_id)
        .filter(InvoiceModel.invoice_number == invoice_number)
    )
    if exclude_id:
        query = query.filter(InvoiceModel.id != exclude_id)
    result = await db.execute(query)
    return result.first() is not None


# --- Reads ---
async def get_invoice(db: AsyncSession, invoice_id: uuid.UUID) -> Optional[InvoiceModel]:
    """
    Get a single invoice by its ID. Items and customer are loaded eagerly.
    """
    result = await db.execute(select(InvoiceModel).filter(InvoiceModel.id == invoice_id))
    return result.scalars().first()

def _display_status_filter(status: InvoiceDisplayStatusEnum, today: date):
    fully_paid = InvoiceModel.paid_amount >= InvoiceModel.total
    if status == InvoiceDisplayStatusEnum.PAID:
        return or_(InvoiceModel.status == InvoiceStatusEnum.PAID, fully_paid)
    if status == InvoiceDisplayStatusEnum.PARTIAL:
        return and_(InvoiceModel.status == InvoiceStatusEnum.PARTIAL, ~fully_paid)
    overdue = and_(InvoiceModel.due_date.is_not(None), InvoiceModel.due_date < today)
    base = and_(InvoiceModel.status == InvoiceStatusEnum.UNPAID, ~fully_paid)
    if status == InvoiceDisplayStatusEnum.OVERDUE:
        return and_(base, overdue)
    return and_(base, ~overdue)

async def get_invoices(
    db: AsyncSession, *, organization_id: uuid.UUID,
    status: Optional[InvoiceDisplayStatusEnum] = None, customer_id: Optional[uuid.UUID] = None,
    search: Optional[str] = None, date_from: Optional[date] = None,
    date_to: Optional[date] = None, skip: int = 0, limit: int = 100
) -> List[InvoiceModel]:
    query = (
        select(InvoiceModel)
        .join(CustomerModel, CustomerModel.id == InvoiceModel.customer_id)
        .filter(InvoiceModel.organization_id == organization_id)
        .order_by(InvoiceModel.invoice_date.desc(), InvoiceModel.invoice_number.desc())
    )
    if status: query = query.filter(_display_status_filter(status, date.today()))
    if customer_id: query = query.filter(InvoiceModel.customer_id == customer_id)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(InvoiceModel.invoice_number.ilike(pattern), CustomerModel.name.ilike(pattern)))
    if date_from: query = query.filter(InvoiceModel.invoice_date >= date_from)
    if date_to: query = query.filter(InvoiceModel.invoice_date <= date_to)
    query = query.offset(skip).limit(limit)
    result = await db.execute(query)
    return result.unique().scalars().all()


# --- Writes ---
def _build_items(items_in: List[InvoiceItemCreate]) -> List[InvoiceItemModel]:
    return [
        InvoiceItemModel(
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

def _apply_totals(db_obj: InvoiceModel) -> None:
    totals = calculate_totals(
        [(i.quantity, i.unit_price, i.discount) for i in db_obj.items], db_obj.discount, db_obj.tax
    )
    db_obj.subtotal = totals.subtotal
    db_obj.discount = totals.discount
    db_obj.tax = totals.tax
    db_obj.total = totals.total
    db_obj.status = stored_status(db_obj.total, db_obj.paid_amount)

def _pin_totals(db_obj: InvoiceModel, item_totals: List[float]) -> None:
    # Items carry amounts already agreed elsewhere instead of quantity * unit_price
    for item, amount in zip(db_obj.items, item_totals):
        item.total = max(0.0, round_currency(amount))
    totals = totals_from_subtotal(sum(item.total for item in db_obj.items), db_obj.discount, db_obj.tax)
    db_obj.subtotal = totals.subtotal
    db_obj.discount = totals.discount
    db_obj.tax = totals.tax
    db_obj.total = totals.total
    db_obj.status = stored_status(db_obj.total, db_obj.paid_amount)

async def _check_customer(db: AsyncSession, *, customer_id: uuid.UUID, organization_id: uuid.UUID) -> None:
    result = await db.execute(
        select(CustomerModel.id)
        .filter(CustomerModel.id == customer_id)
        .filter(CustomerModel.organization_id == organization_id)
    )
    if result.first() is None:
        raise ValueError("Customer not found in this organization.")

async def build_invoice(
    db: AsyncSession, *, invoice_in: InvoiceCreate, organization: OrganizationModel,
    created_by: Optional[uuid.UUID], item_totals: Optional[List[float]] = None,
) -> InvoiceModel:
    """
    Stage a new invoice, its number and its audit entry without committing.
    item_totals, when given, are billed as is in place of quantity * unit_price.
    Raises ValueError for a foreign customer or a duplicate invoice number.
    """
    await _check_customer(db, customer_id=invoice_in.customer_id, organization_id=organization.id)

    if invoice_in.invoice_number:
        invoice_number = invoice_in.invoice_number.strip()
        if await invoice_number_exists(db, organization_id=organization.id, invoice_number=invoice_number):
            raise ValueError(f"Invoice number {invoice_number} already exists.")
    else:
        invoice_number = await issue_next_number(db, organization=organization)

    db_obj = InvoiceModel(
        **invoice_in.model_dump(exclude={"items", "invoice_number", "organization_id"}),
        organization_id=organization.id,
        invoice_number=invoice_number,
        paid_amount=0.0,
        created_by=created_by,
        items=_build_items(invoice_in.items),
    )
    if item_totals is None:
        _apply_totals(db_obj)
    else:
        _pin_totals(db_obj, item_totals)
    db.add(db_obj)
    await db.flush()

    crud_audit_log.add_entry(
        db, organization_id=organization.id, user_id=created_by, action="invoice.created",
        entity_type="invoice", entity_id=db_obj.id,
        details={"invoice_number": invoice_number, "total": db_obj.total},
    )
    return db_obj

async def create_invoice(
    db: AsyncSession, *, invoice_in: InvoiceCreate, organization: OrganizationModel, created_by: Optional[uuid.UUID]
) -> InvoiceModel:
    db_obj = await build_invoice(db, invoice_in=invoice_in, organization=organization, created_by=created_by)
    await db.commit()
    await db.refresh(db_obj)
    logger.info(f"Invoice {db_obj.invoice_number} created for org {organization.id}, total {db_obj.total}")
    return db_obj

async def _replace_items(db: AsyncSession, db_obj: InvoiceModel, items_in: List[InvoiceItemCreate]) -> None:
    """
    Items sent with the id of an existing item are updated in place and keep
    their costing rows. Costing rows of dropped items are deleted.
    """
    existing = {item.id: item for item in db_obj.items}
    kept_ids = set()
    new_items = []
    for index, item_in in enumerate(items_in):
        current = existing.get(item_in.id) if item_in.id else None
        if current is None:
            item = InvoiceItemModel()
        else:
            item = current
            kept_ids.add(current.id)
        item.description = item_in.description
        item.quantity = item_in.quantity
        item.unit = item_in.unit
        item.unit_price = item_in.unit_price
        item.discount = item_in.discount
        item.total = line_item_total(item_in.quantity, item_in.unit_price, item_in.discount)
        item.sort_order = index
        new_items.append(item)

    removed_ids = [item_id for item_id in existing if item_id not in kept_ids]
    if removed_ids:
        await db.execute(
            delete(InvoiceCostingItem)
            .where(InvoiceCostingItem.invoice_id == db_obj.id)
            .where(InvoiceCostingItem.invoice_item_id.in_(removed_ids))
            .execution_options(synchronize_session=False)
        )
    db_obj.items = new_items
    await db.flush()

    # Positions may have moved
    for position, item in enumerate(new_items, start=1):
        if item.id in kept_ids:
            await db.execute(
                update(InvoiceCostingItem)
                .where(InvoiceCostingItem.invoice_item_id == item.id)
                .values(item_no=position)
                .execution_options(synchronize_session=False)
            )

async def update_invoice(
    db: AsyncSession, *, db_obj: InvoiceModel, invoice_in: InvoiceUpdate, user_id: Optional[uuid.UUID] = None
) -> InvoiceModel:
    """
    Update an invoice, replacing its items when they are sent.
    Raises ValueError when the new total falls below the amount already paid.
    """
    update_data = invoice_in.model_dump(exclude_unset=True, exclude={"items"})

    if update_data.get("invoice_number"):
        update_data["invoice_number"] = update_data["invoice_number"].strip()
        if update_data["invoice_number"] != db_obj.invoice_number and await invoice_number_exists(
            db, organization_id=db_obj.organization_id,
            invoice_number=update_data["invoice_number"], exclude_id=db_obj.id,
        ):
            raise ValueError(f"Invoice number {update_data['invoice_number']} already exists.")
    else:
        update_data.pop("invoice_number", None)

    if update_data.get("customer_id") and update_data["customer_id"] != db_obj.customer_id:
        await _check_customer(db, customer_id=update_data["customer_id"], organization_id=db_obj.organization_id)
    elif "customer_id" in update_data and update_data["customer_id"] is None:
        update_data.pop("customer_id")

    for field in ("discount", "tax"):
        if field in update_data and update_data[field] is None:
            update_data.pop(field)

    # Check the new total before touching anything
    items_for_total = invoice_in.items if invoice_in.items is not None else db_obj.items
    new_totals = calculate_totals(
        [(i.quantity, i.unit_price, i.discount) for i in items_for_total],
        update_data.get("discount", db_obj.discount),
        update_data.get("tax", db_obj.tax),
    )
    if new_totals.total < round(db_obj.paid_amount or 0, 2):
        raise ValueError(
            f"Invoice total ({new_totals.total:.2f}) cannot be less than the amount already paid ({db_obj.paid_amount:.2f})."
        )

    for field, value in update_data.items():
        setattr(db_obj, field, value)

    if invoice_in.items is not None:
        await _replace_items(db, db_obj, invoice_in.items)

    _apply_totals(db_obj)
    db.add(db_obj)
    crud_audit_log.add_entry(
        db, organization_id=db_obj.organization_id, user_id=user_id, action="invoice.updated",
        entity_type="invoice", entity_id=db_obj.id,
        details={"invoice_number": db_obj.invoice_number, "total": db_obj.total},
    )
    await db.commit()
    await db.refresh(db_obj)
    return db_obj

async def count_payments(db: AsyncSession, *, invoice_id: uuid.UUID) -> int:
    result = await db.execute(select(func.count(InvoicePayment.id)).filter(InvoicePayment.invoice_id == invoice_id))
    return result.scalar_one()

async def delete_invoice(
    db: AsyncSession, *, db_obj: InvoiceModel, force: bool = False, user_id: Optional[uuid.UUID] = None
) -> InvoiceModel:
    """
    Delete an invoice with its items, payments and costing rows.
    Raises ValueError when payments exist and force is not set.
    """
    payments = await count_payments(db, invoice_id=db_obj.id)
    if payments and not force:
        raise ValueError("Cannot delete an invoice with recorded payments.")

    crud_audit_log.add_entry(
        db, organization_id=db_obj.organization_id, user_id=user_id, action="invoice.deleted",
        entity_type="invoice", entity_id=db_obj.id,
        details={"invoice_number": db_obj.invoice_number, "payments": payments, "forced": force},
    )
    await db.delete(db_obj)
    await db.commit()
    logger.info(f"Invoice {db_obj.invoice_number} deleted (payments={payments}, force={force})")
    return db_obj
