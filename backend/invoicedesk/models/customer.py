import uuid
from sqlalchemy import Column, String, Text, ForeignKey, DateTime, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from invoicedesk.db.base_class import Base

class Customer(Base):
    # __tablename__ will be 'customers'
    __table_args__ = (
        UniqueConstraint("organization_id", "name", name="uq_customer_name_per_org"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(255), nullable=False, index=True)
    company_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True, index=True)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    organization_id = Column(Uuid(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)

    organization = relationship("Organization", back_populates="customers")
    invoices = relationship("Invoice", back_populates="customer", passive_deletes=True)

    def __repr__(self):
        return f"<Customer(id={self.id}, name='{self.name}')>"
