import uuid
from datetime import date
from sqlalchemy import (
    Column, String, Text, ForeignKey, Float, Date, DateTime, Integer, UniqueConstraint, Uuid,
    Enum as DBEnum,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from invoicedesk.db.base_class import Base
from invoicedesk.schemas.invoice import InvoiceStatusEnum
from invoicedesk.services.invoice_status import calculate_invoice_status

class Invoice(Base):
    # __tablename__ will be 'invoices'
    __table_args__ = (
        UniqueConstraint("organization_id", "invoice_number", name="uq_invoice_number_per_org"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    invoice_number = Column(String(50), nullable=False, index=True)
    invoice_date = Column(Date, nullable=False, default=date.today)
    due_date = Column(Date, nullable=True)

    status = Column(DBEnum(InvoiceStatusEnum, name="invoice_status_enum"),
                    nullable=False, default=InvoiceStatusEnum.UNPAID, index=True)

    subtotal = Column(Float, nullable=False, default=0.0)
    discount = Column(Float, nullable=False, default=0.0) # Absolute amount
    tax = Column(Float, nullable=False, default=0.0) # Absolute amount
    total = Column(Float, nullable=False, default=0.0)
    paid_amount = Column(Float, nullable=False, default=0.0)

    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    organization_id = Column(Uuid(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    customer_id = Column(Uuid(as_uuid=True), ForeignKey("customers.id"), nullable=False, index=True)
    created_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    organization = relationship("Organization")
    customer = relationship("Customer", back_populates="invoices", lazy="joined")

    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.sort_order",
        lazy="selectin"
    )
    payments = relationship(
        "InvoicePayment",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoicePayment.payment_date",
        passive_deletes=True
    )
    costing_items = relationship(
        "InvoiceCostingItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceCostingItem.sort_order",
        passive_deletes=True
    )

    @property
    def status_info(self):
        return calculate_invoice_status(self.total, self.paid_amount, self.due_date)

    @property
    def display_status(self):
        return self.status_info.display_status

    @property
    def due_amount(self) -> float:
        return self.status_info.due_amount

    @property
    def customer_name(self):
        return self.customer.name if self.customer else None

    def __repr__(self):
        return f"<Invoice(id={self.id}, invoice_number='{self.invoice_number}')>"


class InvoiceItem(Base):
    __tablename__ = "invoice_items"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    description = Column(Text, nullable=False)
    quantity = Column(Float, nullable=False, default=1)
    unit = Column(String(50), nullable=True, default="pcs")
    unit_price = Column(Float, nullable=False, default=0.0)
    discount = Column(Float, nullable=False, default=0.0)
    total = Column(Float, nullable=False, default=0.0)
    sort_order = Column(Integer, nullable=False, default=0)

    invoice_id = Column(Uuid(as_uuid=True), ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)

    invoice = relationship("Invoice", back_populates="items")

    def __repr__(self):
        return f"<InvoiceItem(id={self.id}, description='{self.description[:30]}')>"


class InvoiceSequence(Base):
    """
    Per-organization counter backing invoice and quotation numbers.
    """
    __tablename__ = "invoice_sequences"
    __table_args__ = (
        UniqueConstraint("organization_id", "kind", name="uq_sequence_per_org_kind"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    organization_id = Column(Uuid(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    kind = Column(String(20), nullable=False, default="invoice") # invoice | quotation
    prefix = Column(String(20), nullable=False, default="INV-")
    starting_number = Column(Integer, nullable=False, default=1)
    current_sequence = Column(Integer, nullable=False, default=0) # 0 means nothing issued yet
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<InvoiceSequence(org={self.organization_id}, kind={self.kind}, current={self.current_sequence})>"
