from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import timedelta
import logging

from invoicedesk import crud, schemas
from invoicedesk.db.session import get_db
from invoicedesk.core.security import create_access_token
from invoicedesk.core.config import settings

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/access-token", response_model=schemas.Token)
async def login_for_access_token(
    db: AsyncSession = Depends(get_db),
    form_data: OAuth2PasswordRequestForm = Depends()
):
    """
    OAuth2 password login; `username` carries the email. Unknown emails,
    wrong passwords and deactivated users get the same answer.
    """
    user = await crud.user.authenticate_user(db, email=form_data.username, password=form_data.password)
    if not user:
        logger.warning(f"Failed login attempt for {form_data.username}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Incorrect email or password")

    lifetime = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return schemas.Token(
        access_token=create_access_token(subject=str(user.id), expires_delta=lifetime),
        expires_in=int(lifetime.total_seconds()),
    )
