import uuid
from sqlalchemy import Column, String, Text, ForeignKey, Float, DateTime, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from invoicedesk.db.base_class import Base

class PriceCalculation(Base):
    """
    Job cost sheet: fixed cost lines plus a margin give the quoted price.
    """
    __tablename__ = "price_calculations"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    organization_id = Column(Uuid(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    customer_id = Column(Uuid(as_uuid=True), ForeignKey("customers.id", ondelete="SET NULL"), nullable=True, index=True)
    job_description = Column(Text, nullable=False)
    quantity = Column(Float, nullable=False, default=1)
    notes = Column(Text, nullable=True)

    # Cost lines (quantity, unit price)
    design_qty = Column(Float, nullable=True)
    design_price = Column(Float, nullable=True)
    plate_qty = Column(Float, nullable=True)
    plate_price = Column(Float, nullable=True)
    plate2_qty = Column(Float, nullable=True)
    plate2_price = Column(Float, nullable=True)
    plate3_qty = Column(Float, nullable=True)
    plate3_price = Column(Float, nullable=True)
    paper1_qty = Column(Float, nullable=True)
    paper1_price = Column(Float, nullable=True)
    paper2_qty = Column(Float, nullable=True)
    paper2_price = Column(Float, nullable=True)
    paper3_qty = Column(Float, nullable=True)
    paper3_price = Column(Float, nullable=True)
    print_qty = Column(Float, nullable=True)
    print_price = Column(Float, nullable=True)
    print2_qty = Column(Float, nullable=True)
    print2_price = Column(Float, nullable=True)
    print3_qty = Column(Float, nullable=True)
    print3_price = Column(Float, nullable=True)
    lamination_qty = Column(Float, nullable=True)
    lamination_price = Column(Float, nullable=True)
    die_cutting_qty = Column(Float, nullable=True)
    die_cutting_price = Column(Float, nullable=True)
    foil_printing_qty = Column(Float, nullable=True)
    foil_printing_price = Column(Float, nullable=True)
    binding_qty = Column(Float, nullable=True)
    binding_price = Column(Float, nullable=True)
    others_qty = Column(Float, nullable=True)
    others_price = Column(Float, nullable=True)

    # Derived on every write by services.pricing.compute_price
    costing_total = Column(Float, nullable=False, default=0.0)
    margin_percent = Column(Float, nullable=False, default=20.0)
    margin_amount = Column(Float, nullable=False, default=0.0)
    final_price = Column(Float, nullable=False, default=0.0)
    price_per_piece = Column(Float, nullable=False, default=0.0)

    # Documents created from this calculation
    quotation_id = Column(Uuid(as_uuid=True), ForeignKey("quotations.id", ondelete="SET NULL"), nullable=True)
    invoice_id = Column(Uuid(as_uuid=True), ForeignKey("invoices.id", ondelete="SET NULL"), nullable=True)

    created_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    customer = relationship("Customer")

    def __repr__(self):
        return f"<PriceCalculation(id={self.id}, job='{self.job_description[:30]}')>"
