import uuid
from sqlalchemy import Column, ForeignKey, DateTime, Uuid, Enum as DBEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from invoicedesk.db.base_class import Base
from invoicedesk.schemas.subscription import SubscriptionPlanEnum, SubscriptionStatusEnum

class Subscription(Base):
    # __tablename__ will be 'subscriptions'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    organization_id = Column(Uuid(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"),
                             nullable=False, unique=True, index=True)
    plan = Column(DBEnum(SubscriptionPlanEnum, name="subscription_plan_enum"),
                  nullable=False, default=SubscriptionPlanEnum.FREE)
    status = Column(DBEnum(SubscriptionStatusEnum, name="subscription_status_enum"),
                    nullable=False, default=SubscriptionStatusEnum.TRIAL)
    trial_ends_at = Column(DateTime(timezone=True), nullable=True)
    current_period_end = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    organization = relationship("Organization", back_populates="subscription")

    def __repr__(self):
        return f"<Subscription(org={self.organization_id}, plan={self.plan}, status={self.status})>"
