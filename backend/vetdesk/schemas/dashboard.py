"""VetDesk Backend — Dashboard Schemas"""

import uuid

from pydantic import Field

from vetdesk.models.visit import VisitStatus
from vetdesk.schemas.common import CamelModel, UtcDateTime


class DashboardStats(CamelModel):
    active_customers: int = Field(description="Customers that are not deleted")
    active_pets: int = Field(description="Pets of active customers that are not deleted")
    visits_this_month: int = Field(description="Visits scheduled in the current UTC month")
    total_revenue: int = Field(description="Sum in cents of treatments on this month's visits")


class UpcomingVisit(CamelModel):
    id: uuid.UUID
    pet_name: str
    customer_name: str
    service_type: str = Field(description="Visit title, or 'Visit' when untitled")
    date: UtcDateTime
    status: VisitStatus
