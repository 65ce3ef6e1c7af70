"""
VetDesk Backend — Customer Service
====================================

What:  CRUD for a clinic user's customers (pet owners).
How:   Every operation is scoped to the authenticated user through
       `ensure_customer`. `petsCount` counts only pets that are not deleted.
Who:   Called by the customer routes.
"""

import logging
import uuid
from typing import Dict, List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from vetdesk.models import Customer, Pet, User, utcnow
from vetdesk.schemas.customer import CustomerCreate, CustomerResponse, CustomerUpdate
from vetdesk.services.ownership import ensure_customer

logger = logging.getLogger(__name__)

# Columns that may not be cleared by an explicit null
_REQUIRED_FIELDS = {"name"}


def serialize_customer(customer: Customer, pets_count: int = 0) -> CustomerResponse:
    return CustomerResponse(
        id=customer.id,
        name=customer.name,
        email=customer.email,
        phone=customer.phone,
        address=customer.address,
        pets_count=pets_count,
    )


class CustomerService:
    """Business logic for customers. Services flush; the request commits."""

    async def _pet_counts(self, db: AsyncSession, customer_ids: List[uuid.UUID]) -> Dict[uuid.UUID, int]:
        if not customer_ids:
            return {}
        result = await db.execute(
            select(Pet.customer_id, func.count(Pet.id))
            .where(Pet.customer_id.in_(customer_ids), Pet.is_deleted.is_(False))
            .group_by(Pet.customer_id)
        )
        return {customer_id: count for customer_id, count in result.all()}

    async def list_customers(self, db: AsyncSession, user: User) -> List[CustomerResponse]:
        result = await db.execute(
            select(Customer)
            .where(Customer.user_id == user.id, Customer.is_deleted.is_(False))
            .order_by(Customer.name, Customer.created_at)
        )
        customers = result.scalars().all()
        counts = await self._pet_counts(db, [c.id for c in customers])
        return [serialize_customer(c, counts.get(c.id, 0)) for c in customers]

    async def create_customer(self, db: AsyncSession, user: User, data: CustomerCreate) -> CustomerResponse:
        customer = Customer(
            user_id=user.id,
            name=data.name,
            email=data.email,
            phone=data.phone,
            address=data.address,
        )
        db.add(customer)
        await db.flush()
        logger.info("Customer %s created by user %s", customer.id, user.id)
        return serialize_customer(customer, 0)

    async def get_customer(self, db: AsyncSession, user: User, customer_id: uuid.UUID) -> CustomerResponse:
        customer = await ensure_customer(db, user.id, customer_id)
        counts = await self._pet_counts(db, [customer.id])
        return serialize_customer(customer, counts.get(customer.id, 0))

    async def update_customer(
        self,
        db: AsyncSession,
        user: User,
        customer_id: uuid.UUID,
        data: CustomerUpdate,
    ) -> CustomerResponse:
        customer = await ensure_customer(db, user.id, customer_id)
        updates = data.model_dump(exclude_unset=True)
        for attr, value in updates.items():
            if value is None and attr in _REQUIRED_FIELDS:
                continue
            setattr(customer, attr, value)
        customer.updated_at = utcnow()
        await db.flush()

        counts = await self._pet_counts(db, [customer.id])
        return serialize_customer(customer, counts.get(customer.id, 0))

    async def delete_customer(self, db: AsyncSession, user: User, customer_id: uuid.UUID) -> None:
        """Soft delete; the customer's pets and visits become unreachable with it."""
        customer = await ensure_customer(db, user.id, customer_id)
        customer.is_deleted = True
        customer.updated_at = utcnow()
        await db.flush()
        logger.info("Customer %s soft-deleted", customer.id)


customer_service = CustomerService()
