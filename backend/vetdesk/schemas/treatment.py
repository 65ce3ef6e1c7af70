"""VetDesk Backend — Treatment Catalog Schemas"""

import uuid
from typing import List, Optional

from pydantic import Field

from vetdesk.schemas.common import CamelModel, RequiredName, UtcDateTime


class TreatmentCreate(CamelModel):
    name: RequiredName
    price_cents: Optional[int] = Field(default=None, ge=0)
    default_interval_days: Optional[int] = Field(default=None, ge=1, le=3650)


class TreatmentUpdate(CamelModel):
    name: Optional[RequiredName] = None
    price_cents: Optional[int] = Field(default=None, ge=0)
    default_interval_days: Optional[int] = Field(default=None, ge=1, le=3650)


class TreatmentResponse(CamelModel):
    id: uuid.UUID
    name: str
    price_cents: Optional[int] = None
    default_interval_days: Optional[int] = None
    created_at: UtcDateTime
    updated_at: UtcDateTime


class TreatmentEnvelope(CamelModel):
    treatment: TreatmentResponse


class TreatmentListResponse(CamelModel):
    treatments: List[TreatmentResponse]
