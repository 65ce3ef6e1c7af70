"""
VetDesk Backend — Dashboard Service
=====================================

What:  Headline numbers and the upcoming-appointments list for the
       dashboard home page.

Definitions:
    activeCustomers  customers that are not deleted
    activePets       non-deleted pets of non-deleted customers
    visitsThisMonth  non-deleted visits whose scheduledStartAt falls in the
                     current UTC calendar month (each visit counted once)
    totalRevenue     sum of priceCents over non-deleted treatments of those
                     visits, in cents
    upcoming         next 5 scheduled visits starting now or later
"""

from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from vetdesk.models import Customer, Pet, User, Visit, VisitStatus, VisitTreatment, utcnow
from vetdesk.schemas.dashboard import DashboardStats, UpcomingVisit

UPCOMING_LIMIT = 5
UNTITLED_SERVICE = "Visit"


def month_bounds(now: datetime) -> Tuple[datetime, datetime]:
    """[first instant of this UTC month, first instant of the next one)."""
    now = now.astimezone(timezone.utc)
    start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end


class DashboardService:

    def _live_visits(self, user: User):
        """Visits reachable through a live pet and a live customer of `user`."""
        return (
            select(Visit.id)
            .join(Customer, Customer.id == Visit.customer_id)
            .join(Pet, Pet.id == Visit.pet_id)
            .where(
                Customer.user_id == user.id,
                Customer.is_deleted.is_(False),
                Pet.is_deleted.is_(False),
                Visit.is_deleted.is_(False),
            )
        )

    async def get_stats(self, db: AsyncSession, user: User, now: Optional[datetime] = None) -> DashboardStats:
        month_start, month_end = month_bounds(now or utcnow())

        active_customers = await db.scalar(
            select(func.count(Customer.id)).where(
                Customer.user_id == user.id, Customer.is_deleted.is_(False)
            )
        )
        active_pets = await db.scalar(
            select(func.count(Pet.id))
            .join(Customer, Customer.id == Pet.customer_id)
            .where(
                Customer.user_id == user.id,
                Customer.is_deleted.is_(False),
                Pet.is_deleted.is_(False),
            )
        )

        month_visits = (
            self._live_visits(user)
            .where(Visit.scheduled_start_at >= month_start, Visit.scheduled_start_at < month_end)
            .subquery()
        )
        visits_this_month = await db.scalar(select(func.count()).select_from(month_visits))
        total_revenue = await db.scalar(
            select(func.coalesce(func.sum(VisitTreatment.price_cents), 0)).where(
                VisitTreatment.visit_id.in_(select(month_visits.c.id)),
                VisitTreatment.is_deleted.is_(False),
            )
        )

        return DashboardStats(
            active_customers=active_customers or 0,
            active_pets=active_pets or 0,
            visits_this_month=visits_this_month or 0,
            total_revenue=int(total_revenue or 0),
        )

    async def get_upcoming(self, db: AsyncSession, user: User, now: Optional[datetime] = None) -> List[UpcomingVisit]:
        result = await db.execute(
            select(Visit, Pet.name, Customer.name)
            .join(Customer, Customer.id == Visit.customer_id)
            .join(Pet, Pet.id == Visit.pet_id)
            .where(
                Customer.user_id == user.id,
                Customer.is_deleted.is_(False),
                Pet.is_deleted.is_(False),
                Visit.is_deleted.is_(False),
                Visit.status == VisitStatus.SCHEDULED,
                Visit.scheduled_start_at >= (now or utcnow()),
            )
            .order_by(Visit.scheduled_start_at.asc())
            .limit(UPCOMING_LIMIT)
        )
        return [
            UpcomingVisit(
                id=visit.id,
                pet_name=pet_name,
                customer_name=customer_name,
                service_type=visit.title or UNTITLED_SERVICE,
                date=visit.scheduled_start_at,
                status=visit.status,
            )
            for visit, pet_name, customer_name in result.all()
        ]


dashboard_service = DashboardService()
