# Models package init
"""
VetDesk Backend — ORM Models
==============================

Importing this package registers every table with `Base.metadata`
(Alembic autogenerate and the test suite's create_all rely on it).

Ownership chain:
    User ─< Customer ─< Pet ─< Visit ─< VisitTreatment / VisitNote / VisitImage
    User ─< Treatment (catalog) >─ VisitTreatment
"""

from vetdesk.models.base import utcnow
from vetdesk.models.customer import Customer
from vetdesk.models.pet import Pet, PetGender, PetType
from vetdesk.models.treatment import Treatment
from vetdesk.models.user import Session, User
from vetdesk.models.visit import Visit, VisitImage, VisitNote, VisitStatus, VisitTreatment

__all__ = [
    "Customer",
    "Pet",
    "PetGender",
    "PetType",
    "Session",
    "Treatment",
    "User",
    "Visit",
    "VisitImage",
    "VisitNote",
    "VisitStatus",
    "VisitTreatment",
    "utcnow",
]
