from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
import logging
import uuid

from invoicedesk.models.user import User as UserModel # Alias to avoid name clash
from invoicedesk.schemas.user import UserCreate, UserUpdate
from invoicedesk.core.security import get_password_hash, verify_password

logger = logging.getLogger(__name__)


async def get_user(db: AsyncSession, user_id: uuid.UUID) -> UserModel | None:
    """
    Get a user by their ID.
    """
    result = await db.execute(select(UserModel).filter(UserModel.id == user_id))
    return result.scalars().first()

async def get_user_by_email(db: AsyncSession, email: str) -> UserModel | None:
    """
    Get a user by their email address (case-insensitive).
    """
    result = await db.execute(select(UserModel).filter(UserModel.email == email.lower()))
    return result.scalars().first()

async def create_user(db: AsyncSession, *, user_in: UserCreate, is_superuser: bool = False) -> UserModel:
    """
    Create a new user, storing only the password hash.
    """
    db_obj_data = user_in.model_dump(exclude={'password'})
    db_obj_data["email"] = db_obj_data["email"].lower()
    db_obj = UserModel(
        **db_obj_data,
        hashed_password=get_password_hash(user_in.password),
        is_superuser=is_superuser,
    )

    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    logger.info(f"User registered: {db_obj.email}")
    return db_obj

async def update_user(
    db: AsyncSession, *, db_obj: UserModel, obj_in: UserUpdate
) -> UserModel:
    """
    Update an existing user.
    Raises ValueError when the new email belongs to another user.
    """
    update_data = obj_in.model_dump(exclude_unset=True)

    if update_data.get("password"):
        update_data["hashed_password"] = get_password_hash(update_data["password"])
    update_data.pop("password", None)

    if update_data.get("email"):
        update_data["email"] = update_data["email"].lower()
        if update_data["email"] != db_obj.email:
            existing_user = await get_user_by_email(db, email=update_data["email"])
            if existing_user and existing_user.id != db_obj.id:
                raise ValueError("Email already registered by another user.")

    for field, value in update_data.items():
        setattr(db_obj, field, value)

    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    return db_obj

async def authenticate_user(
    db: AsyncSession, *, email: str, password: str
) -> UserModel | None:
    """
    Returns the user when the email/password pair is valid and the user is active.
    """
    user = await get_user_by_email(db, email=email)
    if not user:
        return None
    if not user.is_active:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user
