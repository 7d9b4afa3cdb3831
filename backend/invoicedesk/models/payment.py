import uuid
from datetime import date
from sqlalchemy import Column, String, Text, ForeignKey, Float, Date, DateTime, Uuid, Enum as DBEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from invoicedesk.db.base_class import Base
from invoicedesk.schemas.payment import PaymentMethodEnum

class InvoicePayment(Base):
    __tablename__ = "invoice_payments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    invoice_id = Column(Uuid(as_uuid=True), ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    organization_id = Column(Uuid(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    payment_date = Column(Date, nullable=False, default=date.today, index=True)
    payment_method = Column(DBEnum(PaymentMethodEnum, name="payment_method_enum"),
                            nullable=False, default=PaymentMethodEnum.CASH)
    reference = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    created_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    invoice = relationship("Invoice", back_populates="payments", lazy="joined")

    @property
    def invoice_number(self):
        return self.invoice.invoice_number if self.invoice else None

    @property
    def customer_name(self):
        return self.invoice.customer_name if self.invoice else None

    def __repr__(self):
        return f"<InvoicePayment(id={self.id}, invoice_id={self.invoice_id}, amount={self.amount})>"
