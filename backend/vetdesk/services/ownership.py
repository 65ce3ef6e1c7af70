"""
VetDesk Backend — Ownership Chain Checks
==========================================

What:  Loads a resource only if the authenticated user owns it.
How:   Each check walks up the chain to the user:

           treatment (catalog) ── user
           customer ───────────── user
           pet ── customer ────── user
           visit ── pet ── customer ── user

       Soft-deleted rows anywhere on the path make the resource invisible.

Every failure raises NotFoundError (404). A record that belongs to another
clinic user is indistinguishable from one that never existed.
"""

import uuid
from typing import Dict, Iterable, NamedTuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vetdesk.exceptions import NotFoundError
from vetdesk.models import Customer, Pet, Treatment, Visit


class VisitContext(NamedTuple):
    """A visit together with the owners its storage keys are built from."""
    visit: Visit
    customer: Customer
    pet: Pet


async def ensure_customer(db: AsyncSession, user_id: uuid.UUID, customer_id: uuid.UUID) -> Customer:
    result = await db.execute(
        select(Customer).where(
            Customer.id == customer_id,
            Customer.user_id == user_id,
            Customer.is_deleted.is_(False),
        )
    )
    customer = result.scalar_one_or_none()
    if customer is None:
        raise NotFoundError(resource="customer", resource_id=str(customer_id))
    return customer


async def ensure_pet(db: AsyncSession, customer: Customer, pet_id: uuid.UUID) -> Pet:
    """The customer must already have passed ensure_customer."""
    result = await db.execute(
        select(Pet).where(
            Pet.id == pet_id,
            Pet.customer_id == customer.id,
            Pet.is_deleted.is_(False),
        )
    )
    pet = result.scalar_one_or_none()
    if pet is None:
        raise NotFoundError(resource="pet", resource_id=str(pet_id))
    return pet


async def ensure_visit(db: AsyncSession, user_id: uuid.UUID, visit_id: uuid.UUID) -> VisitContext:
    result = await db.execute(
        select(Visit, Customer, Pet)
        .join(Customer, Customer.id == Visit.customer_id)
        .join(Pet, Pet.id == Visit.pet_id)
        .where(
            Visit.id == visit_id,
            Visit.is_deleted.is_(False),
            Customer.user_id == user_id,
            Customer.is_deleted.is_(False),
            Pet.customer_id == Customer.id,
            Pet.is_deleted.is_(False),
        )
    )
    row = result.one_or_none()
    if row is None:
        raise NotFoundError(resource="visit", resource_id=str(visit_id))
    return VisitContext(visit=row[0], customer=row[1], pet=row[2])


async def ensure_treatments(
    db: AsyncSession,
    user_id: uuid.UUID,
    treatment_ids: Iterable[uuid.UUID],
) -> Dict[uuid.UUID, Treatment]:
    """Every id must be a live catalog entry of this user."""
    wanted = set(treatment_ids)
    if not wanted:
        return {}
    result = await db.execute(
        select(Treatment).where(
            Treatment.id.in_(list(wanted)),
            Treatment.user_id == user_id,
            Treatment.is_deleted.is_(False),
        )
    )
    found = {treatment.id: treatment for treatment in result.scalars().all()}
    missing = wanted - found.keys()
    if missing:
        raise NotFoundError(resource="treatment", resource_id=str(sorted(missing, key=str)[0]))
    return found
