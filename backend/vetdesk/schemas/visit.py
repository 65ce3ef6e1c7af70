"""
VetDesk Backend — Visit Schemas
=================================

What:  API contract for visits and the treatments, notes and images
       attached to them.

Visit updates:
    Scalar fields follow partial-update rules. `treatments` and `notes`
    in an update body are APPENDED to the visit; existing rows are removed
    through their own DELETE endpoints.
"""

import uuid
from datetime import date
from typing import List, Optional

from pydantic import Field

from vetdesk.models.visit import VisitStatus
from vetdesk.schemas.common import CamelModel, NoteText, OptionalText, UtcDateTime


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class VisitTreatmentInput(CamelModel):
    treatment_id: uuid.UUID
    price_cents: Optional[int] = Field(default=None, ge=0, description="Price charged at this visit")
    next_due_date: Optional[date] = Field(default=None, description="When the treatment is due again")


class VisitNoteInput(CamelModel):
    note: NoteText


class VisitCreate(CamelModel):
    customer_id: uuid.UUID
    pet_id: uuid.UUID
    scheduled_start_at: UtcDateTime
    scheduled_end_at: Optional[UtcDateTime] = None
    completed_at: Optional[UtcDateTime] = None
    status: Optional[VisitStatus] = Field(default=None, description="Defaults to scheduled")
    title: OptionalText = None
    description: OptionalText = None
    treatments: List[VisitTreatmentInput] = Field(default_factory=list)
    notes: List[VisitNoteInput] = Field(default_factory=list)


class VisitUpdate(CamelModel):
    scheduled_start_at: Optional[UtcDateTime] = None
    scheduled_end_at: Optional[UtcDateTime] = None
    completed_at: Optional[UtcDateTime] = None
    status: Optional[VisitStatus] = None
    title: OptionalText = None
    description: OptionalText = None
    treatments: List[VisitTreatmentInput] = Field(default_factory=list)
    notes: List[VisitNoteInput] = Field(default_factory=list)


class VisitImageUploadUrlRequest(CamelModel):
    content_type: str
    original_name: OptionalText = None


class VisitImageRegisterRequest(CamelModel):
    key: str = Field(min_length=1, description="Key returned by the upload-url endpoint")
    original_name: OptionalText = None
    content_type: OptionalText = None


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class VisitResponse(CamelModel):
    id: uuid.UUID
    pet_id: uuid.UUID
    customer_id: uuid.UUID
    status: VisitStatus
    scheduled_start_at: UtcDateTime
    scheduled_end_at: Optional[UtcDateTime] = None
    completed_at: Optional[UtcDateTime] = None
    title: Optional[str] = None
    description: Optional[str] = None
    created_at: UtcDateTime
    updated_at: UtcDateTime


class VisitTreatmentResponse(CamelModel):
    id: uuid.UUID
    visit_id: uuid.UUID
    treatment_id: uuid.UUID
    treatment_name: Optional[str] = Field(default=None, description="Catalog name of the treatment")
    price_cents: Optional[int] = None
    next_due_date: Optional[date] = None
    created_at: UtcDateTime
    updated_at: UtcDateTime


class VisitNoteResponse(CamelModel):
    id: uuid.UUID
    visit_id: uuid.UUID
    note: str
    created_at: UtcDateTime
    updated_at: UtcDateTime


class VisitImageResponse(CamelModel):
    id: uuid.UUID
    visit_id: uuid.UUID
    original_name: Optional[str] = None
    content_type: Optional[str] = None
    url: str = Field(description="Presigned download URL")
    created_at: UtcDateTime


class VisitWithDetailsResponse(VisitResponse):
    treatments: List[VisitTreatmentResponse] = Field(default_factory=list)
    notes: List[VisitNoteResponse] = Field(default_factory=list)
    images: List[VisitImageResponse] = Field(default_factory=list)


class VisitEnvelope(CamelModel):
    visit: VisitResponse


class VisitDetailsEnvelope(CamelModel):
    visit: VisitWithDetailsResponse


class VisitListResponse(CamelModel):
    visits: List[VisitResponse]


class VisitImageEnvelope(CamelModel):
    image: VisitImageResponse
