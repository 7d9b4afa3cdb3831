from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Any # Any is used in return type hints
import uuid

from invoicedesk import crud, models, schemas
from invoicedesk.db.session import get_db
from invoicedesk.api import deps
from invoicedesk.services import plans

router = APIRouter()

@router.post("/", response_model=schemas.Organization, status_code=status.HTTP_201_CREATED)
async def create_new_organization(
    *,
    db: AsyncSession = Depends(get_db),
    org_in: schemas.OrganizationCreate,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    """
    Create a new organization. The current user becomes its owner and the
    organization starts on a free trial.
    """
    organization = await crud.organization.create_organization(
        db=db, obj_in=org_in, owner_id=current_user.id
    )
    return organization

@router.get("/", response_model=List[schemas.OrganizationSummary])
async def read_organizations_for_user(
    db: AsyncSession = Depends(get_db),
    skip: int = 0,
    limit: int = 100,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    """
    Organizations the current user belongs to, with their role in each.
    """
    rows = await crud.organization.get_organizations_for_user(
        db, user_id=current_user.id, skip=skip, limit=limit
    )
    return [
        schemas.OrganizationSummary(id=org.id, name=org.name, slug=org.slug, role=role)
        for org, role in rows
    ]

@router.get("/{org_id}", response_model=schemas.Organization)
async def read_organization_by_id(
    org_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    membership = await deps.get_org_membership(db=db, org_id=org_id, current_user=current_user)
    return membership.organization

@router.put("/{org_id}", response_model=schemas.Organization)
async def update_existing_organization(
    org_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    org_in: schemas.OrganizationUpdate,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    membership = await deps.get_org_membership(db=db, org_id=org_id, current_user=current_user)
    deps.require_permission(membership, "settings", "edit")
    return await crud.organization.update_organization(db=db, db_obj=membership.organization, obj_in=org_in)

@router.delete("/{org_id}", response_model=schemas.Organization)
async def delete_existing_organization(
    org_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    """
    Delete an organization. Owners only.
    """
    membership = await deps.get_org_membership(db=db, org_id=org_id, current_user=current_user)
    deps.require_role(membership, schemas.OrgRoleEnum.OWNER)
    return await crud.organization.delete_organization(db=db, db_obj=membership.organization)


# --- Members ---
@router.get("/{org_id}/members", response_model=List[schemas.Member])
async def read_members(
    org_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    membership = await deps.get_org_membership(db=db, org_id=org_id, current_user=current_user)
    deps.require_permission(membership, "team_members", "view")
    return await crud.organization.get_members(db, organization_id=org_id)

@router.post("/{org_id}/members", response_model=schemas.Member, status_code=status.HTTP_201_CREATED)
async def add_member(
    org_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    member_in: schemas.MemberCreate,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    """
    Add an existing user to the organization by email.
    """
    membership = await deps.get_org_membership(db=db, org_id=org_id, current_user=current_user)
    deps.require_permission(membership, "team_members", "create")
    await deps.ensure_subscription_allows(db, membership, schemas.LimitTypeEnum.USERS)

    user = await crud.user.get_user_by_email(db, email=member_in.email)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No user is registered with this email.")
    try:
        return await crud.organization.add_member(db, organization_id=org_id, user=user, role=member_in.role)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

async def _get_member_or_404(db: AsyncSession, org_id: uuid.UUID, member_id: uuid.UUID) -> models.OrganizationMember:
    member = await crud.organization.get_member(db, member_id=member_id)
    if not member or member.organization_id != org_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")
    return member

@router.put("/{org_id}/members/{member_id}", response_model=schemas.Member)
async def update_member(
    org_id: uuid.UUID,
    member_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    member_in: schemas.MemberUpdate,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    membership = await deps.get_org_membership(db=db, org_id=org_id, current_user=current_user)
    deps.require_role(membership, schemas.OrgRoleEnum.OWNER)
    member = await _get_member_or_404(db, org_id, member_id)
    try:
        return await crud.organization.update_member_role(db, db_obj=member, role=member_in.role)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.delete("/{org_id}/members/{member_id}", response_model=schemas.Member)
async def remove_member(
    org_id: uuid.UUID,
    member_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    membership = await deps.get_org_membership(db=db, org_id=org_id, current_user=current_user)
    deps.require_role(membership, schemas.OrgRoleEnum.OWNER)
    member = await _get_member_or_404(db, org_id, member_id)
    try:
        return await crud.organization.remove_member(db, db_obj=member)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


# --- Subscription ---
@router.get("/{org_id}/subscription", response_model=schemas.SubscriptionOverview)
async def read_subscription(
    org_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    """
    Plan, status, days remaining and any usage warnings.
    """
    await deps.get_org_membership(db=db, org_id=org_id, current_user=current_user)
    subscription = await crud.subscription.get_subscription(db, organization_id=org_id)
    if not subscription:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subscription not found")

    usage = await crud.subscription.get_all_usage(db, organization_id=org_id)
    warnings = []
    for limit_type, current in usage.items():
        limit_status = plans.check_limit(subscription.plan, limit_type, current)
        if limit_status.level != "none":
            warnings.append(schemas.LimitWarning(
                type=limit_type,
                level=limit_status.level,
                current=limit_status.current,
                limit=limit_status.limit,
                percentage=limit_status.percentage,
                message=limit_status.message,
            ))
    return schemas.SubscriptionOverview(
        subscription=schemas.Subscription.model_validate(subscription),
        is_active=plans.is_subscription_active(subscription),
        days_remaining=plans.days_remaining(subscription),
        warnings=warnings,
    )

@router.put("/{org_id}/subscription", response_model=schemas.Subscription)
async def update_subscription(
    org_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    subscription_in: schemas.SubscriptionUpdate,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    membership = await deps.get_org_membership(db=db, org_id=org_id, current_user=current_user)
    deps.require_role(membership, schemas.OrgRoleEnum.OWNER)
    subscription = await crud.subscription.get_subscription(db, organization_id=org_id)
    if not subscription:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subscription not found")
    return await crud.subscription.update_subscription(db, db_obj=subscription, obj_in=subscription_in)
