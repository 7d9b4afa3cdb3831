import uuid
from datetime import date
from sqlalchemy import (
    Column, String, Text, ForeignKey, Float, Date, DateTime, Integer, UniqueConstraint, Uuid,
    Enum as DBEnum,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from invoicedesk.db.base_class import Base
from invoicedesk.schemas.quotation import QuotationStatusEnum

class Quotation(Base):
    # __tablename__ will be 'quotations'
    __table_args__ = (
        UniqueConstraint("organization_id", "quotation_number", name="uq_quotation_number_per_org"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    quotation_number = Column(String(50), nullable=False, index=True)
    quotation_date = Column(Date, nullable=False, default=date.today)
    valid_until = Column(Date, nullable=True)
    status = Column(DBEnum(QuotationStatusEnum, name="quotation_status_enum"),
                    nullable=False, default=QuotationStatusEnum.PENDING, index=True)

    subtotal = Column(Float, nullable=False, default=0.0)
    discount = Column(Float, nullable=False, default=0.0)
    tax = Column(Float, nullable=False, default=0.0)
    total = Column(Float, nullable=False, default=0.0)
    notes = Column(Text, nullable=True)

    organization_id = Column(Uuid(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    customer_id = Column(Uuid(as_uuid=True), ForeignKey("customers.id", ondelete="SET NULL"), nullable=True, index=True)
    # Set once the quotation has been converted
    invoice_id = Column(Uuid(as_uuid=True), ForeignKey("invoices.id", ondelete="SET NULL"), nullable=True)
    created_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    customer = relationship("Customer")
    items = relationship(
        "QuotationItem",
        back_populates="quotation",
        cascade="all, delete-orphan",
        order_by="QuotationItem.sort_order",
        lazy="selectin"
    )

    def __repr__(self):
        return f"<Quotation(id={self.id}, quotation_number='{self.quotation_number}')>"


class QuotationItem(Base):
    __tablename__ = "quotation_items"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    quotation_id = Column(Uuid(as_uuid=True), ForeignKey("quotations.id", ondelete="CASCADE"), nullable=False, index=True)
    description = Column(Text, nullable=False)
    quantity = Column(Float, nullable=False, default=1)
    unit = Column(String(50), nullable=True, default="pcs")
    unit_price = Column(Float, nullable=False, default=0.0)
    discount = Column(Float, nullable=False, default=0.0)
    total = Column(Float, nullable=False, default=0.0)
    sort_order = Column(Integer, nullable=False, default=0)

    quotation = relationship("Quotation", back_populates="items")

    def __repr__(self):
        return f"<QuotationItem(id={self.id}, description='{self.description[:30]}')>"
