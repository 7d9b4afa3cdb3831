from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any

from invoicedesk import crud, models, schemas
from invoicedesk.db.session import get_db
from invoicedesk.api import deps

router = APIRouter()


async def _profile(db: AsyncSession, user: models.User) -> schemas.UserProfile:
    rows = await crud.organization.get_organizations_for_user(db, user_id=user.id)
    return schemas.UserProfile(
        **schemas.UserOut.model_validate(user).model_dump(),
        organizations=[
            schemas.OrganizationSummary(id=org.id, name=org.name, slug=org.slug, role=role)
            for org, role in rows
        ],
    )

@router.post("/", response_model=schemas.UserOut, status_code=status.HTTP_201_CREATED)
async def register_user(
    *,
    db: AsyncSession = Depends(get_db),
    user_in: schemas.UserCreate,
) -> Any:
    """
    Open registration. The new user belongs to no organization until they
    create one or an owner adds them by email.
    """
    if await crud.user.get_user_by_email(db, email=user_in.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A user with this email is already registered.",
        )
    try:
        return await crud.user.create_user(db=db, user_in=user_in)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get("/me", response_model=schemas.UserProfile)
async def read_users_me(
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(deps.get_current_active_user),
) -> Any:
    """
    The caller with their organizations and role in each.
    """
    return await _profile(db, current_user)

@router.put("/me", response_model=schemas.UserProfile)
async def update_user_me(
    *,
    db: AsyncSession = Depends(get_db),
    user_in: schemas.UserUpdate,
    current_user: models.User = Depends(deps.get_current_active_user),
) -> Any:
    try:
        user = await crud.user.update_user(db=db, db_obj=current_user, obj_in=user_in)
    except ValueError as e: # Email taken
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return await _profile(db, user)
