from dataclasses import dataclass
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
import logging
import uuid

from invoicedesk.core.security import decode_token
from invoicedesk.core.config import settings
from invoicedesk.core.permissions import (
    CostingPermissions,
    CostingTemplatePermissions,
    costing_permissions_for,
    costing_template_permissions_for,
    has_permission,
    permission_denied_message,
)
from invoicedesk.db.session import get_db
from invoicedesk import crud, models, schemas
from invoicedesk.services import plans

logger = logging.getLogger(__name__)

# This defines the URL where clients will send username/password to get a token
reusable_oauth2 = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/login/access-token"
)

async def get_current_user(
    db: AsyncSession = Depends(get_db), token: str = Depends(reusable_oauth2)
) -> models.User:
    """
    Dependency to get the current user from a JWT token.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    token_data = decode_token(token)
    if not token_data or not token_data.sub: # token_data.sub is expected to be user_id
        raise credentials_exception

    try:
        user_id = uuid.UUID(token_data.sub)
    except ValueError:
        # If 'sub' is not a valid UUID string
        raise credentials_exception

    user = await crud.user.get_user(db, user_id=user_id)
    if not user:
        raise credentials_exception
    return user

async def get_current_active_user(
    current_user: models.User = Depends(get_current_user),
) -> models.User:
    """
    Dependency to get the current active user.
    Checks if the user obtained from get_current_user is active.
    """
    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")
    return current_user


@dataclass
class OrgMembership:
    """
    The caller's access to one organization.
    """
    organization: models.Organization
    user: models.User
    role: schemas.OrgRoleEnum
    member_id: uuid.UUID | None = None

    @property
    def organization_id(self) -> uuid.UUID:
        return self.organization.id

    @property
    def user_id(self) -> uuid.UUID:
        return self.user.id

    @property
    def costing(self) -> CostingPermissions:
        return costing_permissions_for(self.role)

    @property
    def costing_templates(self) -> CostingTemplatePermissions:
        return costing_template_permissions_for(self.role)


async def get_org_membership(
    *, db: AsyncSession, org_id: uuid.UUID, current_user: models.User
) -> OrgMembership:
    """
    Resolve the caller's membership of an organization.
    Raises 404 when the organization does not exist or the caller is not a
    member, so other tenants' ids are indistinguishable from missing ones.
    Super users act as owners everywhere.
    """
    organization = await crud.organization.get_organization(db, org_id=org_id)
    if not organization:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Organization not found")
    if current_user.is_superuser:
        return OrgMembership(organization=organization, user=current_user, role=schemas.OrgRoleEnum.OWNER)

    member = await crud.organization.get_membership(db, organization_id=org_id, user_id=current_user.id)
    if not member:
        logger.warning(f"User {current_user.id} tried to access organization {org_id} without membership")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Organization not found")
    return OrgMembership(organization=organization, user=current_user, role=member.role, member_id=member.id)

def require_permission(membership: OrgMembership, module: str, action: str) -> None:
    if not has_permission(membership.role, module, action):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=permission_denied_message(action, membership.role, module),
        )

def require_role(membership: OrgMembership, *roles: schemas.OrgRoleEnum) -> None:
    if membership.role not in roles:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have permission for this action",
        )

def require_costing(membership: OrgMembership, capability: str) -> CostingPermissions:
    """
    capability is one of view, edit, save, reset, view_profit.
    """
    permissions = membership.costing
    if not getattr(permissions, f"can_{capability}"):
        action = "costing_profit" if capability == "view_profit" else f"costing_{capability}"
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=permission_denied_message(action, membership.role),
        )
    return permissions

def require_template_permission(membership: OrgMembership, capability: str) -> None:
    """
    capability is view or edit.
    """
    if not getattr(membership.costing_templates, f"can_{capability}"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=permission_denied_message(f"template_{capability}", membership.role),
        )

async def ensure_subscription_allows(
    db: AsyncSession, membership: OrgMembership, limit_type: schemas.LimitTypeEnum
) -> plans.LimitStatus:
    """
    402 when the subscription is inactive or the plan's hard limit is reached.
    """
    subscription = await crud.subscription.get_subscription(db, organization_id=membership.organization_id)
    if not plans.is_subscription_active(subscription):
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail="Your subscription is not active. Please renew to continue.",
        )
    limit_status = await crud.subscription.check_limit(
        db, subscription=subscription, organization_id=membership.organization_id, limit_type=limit_type
    )
    if not limit_status.allowed:
        raise HTTPException(status_code=status.HTTP_402_PAYMENT_REQUIRED, detail=limit_status.message)
    return limit_status

async def get_invoice_with_membership(
    *, db: AsyncSession, invoice_id: uuid.UUID, current_user: models.User
) -> tuple[models.Invoice, OrgMembership]:
    """
    An invoice together with the caller's membership of its organization.
    Invoices of organizations the caller does not belong to look missing.
    """
    invoice = await crud.invoice.get_invoice(db, invoice_id=invoice_id)
    if not invoice:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found")
    try:
        membership = await get_org_membership(db=db, org_id=invoice.organization_id, current_user=current_user)
    except HTTPException:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found")
    return invoice, membership
