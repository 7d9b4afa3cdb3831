import uuid
from sqlalchemy import Column, String, Text, ForeignKey, Float, Integer, DateTime, Boolean, JSON, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from invoicedesk.db.base_class import Base

class InvoiceCostingItem(Base):
    """
    Internal-only cost line of an invoice. Never rendered for customers.
    """
    __tablename__ = "invoice_costing_items"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    invoice_id = Column(Uuid(as_uuid=True), ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    organization_id = Column(Uuid(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    # Null for rows that cost the invoice as a whole
    invoice_item_id = Column(Uuid(as_uuid=True), ForeignKey("invoice_items.id", ondelete="CASCADE"), nullable=True, index=True)
    item_no = Column(Integer, nullable=True)

    item_type = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    quantity = Column(Float, nullable=False, default=1)
    price = Column(Float, nullable=False, default=0.0)
    line_total = Column(Float, nullable=False, default=0.0)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    invoice = relationship("Invoice", back_populates="costing_items")

    def __repr__(self):
        return f"<InvoiceCostingItem(id={self.id}, type='{self.item_type}', total={self.line_total})>"


class CostingTemplate(Base):
    """
    Saved, reusable set of costing rows kept as a JSON list.
    """
    __tablename__ = "costing_templates"
    __table_args__ = (
        UniqueConstraint("organization_id", "name", name="uq_costing_template_name_per_org"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    organization_id = Column(Uuid(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    items = Column(JSON, nullable=False, default=list)
    created_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def item_count(self) -> int:
        return len(self.items or [])

    @property
    def total(self) -> float:
        return round(sum(float(i.get("line_total") or 0) for i in (self.items or [])), 2)

    def __repr__(self):
        return f"<CostingTemplate(id={self.id}, name='{self.name}')>"


class CostingItemTemplate(Base):
    """
    Predefined costing structure for an item type such as Plate or Print.
    """
    __tablename__ = "costing_item_templates"
    __table_args__ = (
        UniqueConstraint("organization_id", "item_key", name="uq_item_template_per_org"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    organization_id = Column(Uuid(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    item_name = Column(String(255), nullable=False)
    # normalize_item_key(item_name), kept for lookups and uniqueness
    item_key = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    rows = relationship(
        "CostingItemTemplateRow",
        back_populates="template",
        cascade="all, delete-orphan",
        order_by="CostingItemTemplateRow.sort_order",
        lazy="selectin"
    )

    def __repr__(self):
        return f"<CostingItemTemplate(id={self.id}, item_name='{self.item_name}')>"


class CostingItemTemplateRow(Base):
    __tablename__ = "costing_item_template_rows"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    template_id = Column(Uuid(as_uuid=True), ForeignKey("costing_item_templates.id", ondelete="CASCADE"), nullable=False, index=True)
    sub_item_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    default_qty = Column(Float, nullable=False, default=1)
    default_price = Column(Float, nullable=False, default=0.0)
    sort_order = Column(Integer, nullable=False, default=0)

    template = relationship("CostingItemTemplate", back_populates="rows")

    def __repr__(self):
        return f"<CostingItemTemplateRow(id={self.id}, sub_item_name='{self.sub_item_name}')>"
