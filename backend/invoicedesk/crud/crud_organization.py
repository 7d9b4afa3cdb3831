from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func
from datetime import datetime, timedelta, timezone
import logging
import uuid

from invoicedesk.core.config import settings
from invoicedesk.models.organization import Organization as OrganizationModel, OrganizationMember as MemberModel
from invoicedesk.models.subscription import Subscription as SubscriptionModel
from invoicedesk.models.user import User as UserModel
from invoicedesk.schemas.organization import OrganizationCreate, OrganizationUpdate, OrgRoleEnum
from invoicedesk.schemas.subscription import SubscriptionPlanEnum, SubscriptionStatusEnum
from invoicedesk.services.numbering import slugify

logger = logging.getLogger(__name__)


async def get_organization(db: AsyncSession, org_id: uuid.UUID) -> OrganizationModel | None:
    """
    Get a single organization by its ID.
    """
    result = await db.execute(select(OrganizationModel).filter(OrganizationModel.id == org_id))
    return result.scalars().first()

async def get_organizations_for_user(
    db: AsyncSession, *, user_id: uuid.UUID, skip: int = 0, limit: int = 100
) -> list[tuple[OrganizationModel, OrgRoleEnum]]:
    """
    Organizations the user is a member of, with the user's role in each.
    """
    result = await db.execute(
        select(OrganizationModel, MemberModel.role)
        .join(MemberModel, MemberModel.organization_id == OrganizationModel.id)
        .filter(MemberModel.user_id == user_id)
        .order_by(OrganizationModel.name)
        .offset(skip)
        .limit(limit)
    )
    return [(org, role) for org, role in result.all()]

async def _unique_slug(db: AsyncSession, name: str) -> str:
    base = slugify(name)
    slug = base
    suffix = 1
    while True:
        result = await db.execute(select(OrganizationModel.id).filter(OrganizationModel.slug == slug))
        if result.first() is None:
            return slug
        suffix += 1
        slug = f"{base}-{suffix}"

async def create_organization(
    db: AsyncSession, *, obj_in: OrganizationCreate, owner_id: uuid.UUID
) -> OrganizationModel:
    """
    Create an organization. The creator becomes its owner member and the
    organization starts on a free trial.
    """
    db_obj = OrganizationModel(
        **obj_in.model_dump(),
        slug=await _unique_slug(db, obj_in.name),
        owner_id=owner_id,
    )
    db.add(db_obj)
    await db.flush()

    db.add(MemberModel(organization_id=db_obj.id, user_id=owner_id, role=OrgRoleEnum.OWNER))
    db.add(SubscriptionModel(
        organization_id=db_obj.id,
        plan=SubscriptionPlanEnum.FREE,
        status=SubscriptionStatusEnum.TRIAL,
        trial_ends_at=datetime.now(timezone.utc) + timedelta(days=settings.TRIAL_DAYS),
    ))
    await db.commit()
    await db.refresh(db_obj)
    logger.info(f"Organization created: {db_obj.slug} ({db_obj.id})")
    return db_obj

async def update_organization(
    db: AsyncSession, *, db_obj: OrganizationModel, obj_in: OrganizationUpdate
) -> OrganizationModel:
    update_data = obj_in.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(db_obj, field, value)

    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    return db_obj

async def delete_organization(db: AsyncSession, *, db_obj: OrganizationModel) -> OrganizationModel:
    await db.delete(db_obj)
    await db.commit()
    return db_obj


# --- Membership ---
async def get_membership(
    db: AsyncSession, *, organization_id: uuid.UUID, user_id: uuid.UUID
) -> MemberModel | None:
    result = await db.execute(
        select(MemberModel)
        .filter(MemberModel.organization_id == organization_id)
        .filter(MemberModel.user_id == user_id)
    )
    return result.scalars().first()

async def get_member(db: AsyncSession, *, member_id: uuid.UUID) -> MemberModel | None:
    result = await db.execute(select(MemberModel).filter(MemberModel.id == member_id))
    return result.scalars().first()

async def get_members(db: AsyncSession, *, organization_id: uuid.UUID) -> list[MemberModel]:
    result = await db.execute(
        select(MemberModel)
        .join(UserModel, UserModel.id == MemberModel.user_id)
        .filter(MemberModel.organization_id == organization_id)
        .order_by(UserModel.email)
    )
    return result.scalars().unique().all()

async def count_members(db: AsyncSession, *, organization_id: uuid.UUID, role: OrgRoleEnum | None = None) -> int:
    query = select(func.count(MemberModel.id)).filter(MemberModel.organization_id == organization_id)
    if role is not None:
        query = query.filter(MemberModel.role == role)
    result = await db.execute(query)
    return result.scalar_one()

async def add_member(
    db: AsyncSession, *, organization_id: uuid.UUID, user: UserModel, role: OrgRoleEnum
) -> MemberModel:
    """
    Raises ValueError for owner grants and for existing members.
    """
    if role == OrgRoleEnum.OWNER:
        raise ValueError("The owner role cannot be granted to a new member.")
    existing = await get_membership(db, organization_id=organization_id, user_id=user.id)
    if existing:
        raise ValueError("This user is already a member of the organization.")

    db_obj = MemberModel(organization_id=organization_id, user_id=user.id, role=role)
    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    return db_obj

async def update_member_role(db: AsyncSession, *, db_obj: MemberModel, role: OrgRoleEnum) -> MemberModel:
    """
    Raises ValueError when demoting the last owner.
    """
    if db_obj.role == OrgRoleEnum.OWNER and role != OrgRoleEnum.OWNER:
        owners = await count_members(db, organization_id=db_obj.organization_id, role=OrgRoleEnum.OWNER)
        if owners <= 1:
            raise ValueError("The last owner of an organization cannot be demoted.")
    db_obj.role = role
    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    return db_obj

async def remove_member(db: AsyncSession, *, db_obj: MemberModel) -> MemberModel:
    """
    Raises ValueError when removing the last owner.
    """
    if db_obj.role == OrgRoleEnum.OWNER:
        owners = await count_members(db, organization_id=db_obj.organization_id, role=OrgRoleEnum.OWNER)
        if owners <= 1:
            raise ValueError("The last owner of an organization cannot be removed.")
    await db.delete(db_obj)
    await db.commit()
    return db_obj
