from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import or_, func
import uuid

from invoicedesk.models.customer import Customer as CustomerModel # Alias
from invoicedesk.models.invoice import Invoice as InvoiceModel
from invoicedesk.schemas.customer import CustomerCreate, CustomerUpdate

async def get_customer(db: AsyncSession, customer_id: uuid.UUID) -> CustomerModel | None:
    """
    Get a single customer by its ID.
    """
    result = await db.execute(select(CustomerModel).filter(CustomerModel.id == customer_id))
    return result.scalars().first()

async def get_customer_for_org(
    db: AsyncSession, *, customer_id: uuid.UUID, organization_id: uuid.UUID
) -> CustomerModel | None:
    result = await db.execute(
        select(CustomerModel)
        .filter(CustomerModel.id == customer_id)
        .filter(CustomerModel.organization_id == organization_id)
    )
    return result.scalars().first()

async def get_customer_by_name_for_org(
    db: AsyncSession, *, name: str, organization_id: uuid.UUID
) -> CustomerModel | None:
    """
    Get a customer by name within a specific organization.
    """
    result = await db.execute(
        select(CustomerModel)
        .filter(func.lower(CustomerModel.name) == name.strip().lower())
        .filter(CustomerModel.organization_id == organization_id)
    )
    return result.scalars().first()

async def get_customers_by_organization(
    db: AsyncSession, *, organization_id: uuid.UUID, search: str | None = None, skip: int = 0, limit: int = 100
) -> list[CustomerModel]:
    """
    Get a list of customers for a specific organization with pagination.
    `search` matches name, company name or phone, case-insensitively.
    """
    query = select(CustomerModel).filter(CustomerModel.organization_id == organization_id)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(
            CustomerModel.name.ilike(pattern),
            CustomerModel.company_name.ilike(pattern),
            CustomerModel.phone.ilike(pattern),
        ))
    query = query.order_by(CustomerModel.name).offset(skip).limit(limit)
    result = await db.execute(query)
    return result.scalars().all()

async def create_customer(
    db: AsyncSession, *, customer_in: CustomerCreate # organization_id is in CustomerCreate
) -> CustomerModel:
    """
    Create a new customer.
    Raises ValueError when the name is already used in the organization.
    """
    existing = await get_customer_by_name_for_org(
        db, name=customer_in.name, organization_id=customer_in.organization_id
    )
    if existing:
        raise ValueError(f"A customer named '{customer_in.name}' already exists.")

    db_obj = CustomerModel(**customer_in.model_dump(exclude_unset=True))
    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    return db_obj

async def update_customer(
    db: AsyncSession, *, db_obj: CustomerModel, obj_in: CustomerUpdate
) -> CustomerModel:
    """
    Update an existing customer.
    'db_obj' is the existing customer model instance.
    'obj_in' is a Pydantic schema with the update data.
    """
    update_data = obj_in.model_dump(exclude_unset=True)

    if "name" in update_data and update_data["name"] != db_obj.name:
        existing_customer = await get_customer_by_name_for_org(
            db,
            name=update_data["name"],
            organization_id=db_obj.organization_id # Check within the same org
        )
        if existing_customer and existing_customer.id != db_obj.id:
            raise ValueError(f"A customer named '{update_data['name']}' already exists.")

    for field, value in update_data.items():
        setattr(db_obj, field, value)

    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    return db_obj

async def delete_customer(db: AsyncSession, *, db_obj: CustomerModel) -> CustomerModel:
    """
    Delete a customer. Raises ValueError while invoices still reference it.
    """
    result = await db.execute(
        select(func.count(InvoiceModel.id)).filter(InvoiceModel.customer_id == db_obj.id)
    )
    if result.scalar_one() > 0:
        raise ValueError("Cannot delete a customer that has invoices.")
    await db.delete(db_obj)
    await db.commit()
    return db_obj
