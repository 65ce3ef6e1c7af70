"""
VetDesk Backend — Storage Key Layout
======================================

Every image key lives under the prefix of the pet it belongs to:

    <user-seg>/<customer-seg>/<pet-seg>/profile-<epoch ms>
    <user-seg>/<customer-seg>/<pet-seg>/visits/<visit id>/<epoch ms>-<hex><ext>

A segment is `<slug(label)>-<id>`; the labels are the user's email local
part, the customer name and the pet name. Slugs keep keys readable in the
bucket console. Validation matches segments by their id suffix only, so a
later rename does not orphan existing keys.

Registering a key re-validates it against the resource, which stops a
client from attaching another tenant's object to its own records.
"""

import re
import secrets
import time
import unicodedata
import uuid
from typing import List, Optional

from vetdesk.exceptions import InvalidStorageKeyError, ValidationError

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}

PROFILE_PREFIX = "profile-"
VISITS_DIR = "visits"
_SLUG_MAX_LENGTH = 40


def slugify(label: Optional[str]) -> str:
    """Lower-case ASCII slug; characters outside [a-z0-9] collapse to '-'."""
    if not label:
        return ""
    ascii_label = unicodedata.normalize("NFKD", label).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_label.lower()).strip("-")
    return slug[:_SLUG_MAX_LENGTH].rstrip("-")


def segment(label: Optional[str], entity_id: uuid.UUID) -> str:
    slug = slugify(label)
    return f"{slug}-{entity_id}" if slug else str(entity_id)


def email_label(email: str) -> str:
    return email.split("@", 1)[0]


def pet_prefix(
    user_id: uuid.UUID,
    user_email: str,
    customer_id: uuid.UUID,
    customer_name: str,
    pet_id: uuid.UUID,
    pet_name: str,
) -> str:
    return "/".join(
        (
            segment(email_label(user_email), user_id),
            segment(customer_name, customer_id),
            segment(pet_name, pet_id),
        )
    )


def _now_ms() -> int:
    return int(time.time() * 1000)


def new_pet_profile_key(prefix: str) -> str:
    return f"{prefix}/{PROFILE_PREFIX}{_now_ms()}"


def new_visit_image_key(prefix: str, visit_id: uuid.UUID, content_type: str) -> str:
    extension = ALLOWED_IMAGE_TYPES.get(content_type, "")
    return f"{prefix}/{VISITS_DIR}/{visit_id}/{_now_ms()}-{secrets.token_hex(4)}{extension}"


def validate_image_content_type(content_type: str) -> str:
    """Returns the normalized MIME type or raises ValidationError (400)."""
    normalized = (content_type or "").split(";", 1)[0].strip().lower()
    if normalized not in ALLOWED_IMAGE_TYPES:
        raise ValidationError(
            message=(
                f"Content type '{content_type}' is not supported. "
                f"Allowed: {', '.join(sorted(ALLOWED_IMAGE_TYPES))}"
            ),
            field="contentType",
            context={"allowed_types": sorted(ALLOWED_IMAGE_TYPES)},
        )
    return normalized


def _segment_matches(value: str, entity_id: uuid.UUID) -> bool:
    expected = str(entity_id)
    return value == expected or value.endswith(f"-{expected}")


def _matches_pet(parts: List[str], user_id, customer_id, pet_id) -> bool:
    return (
        len(parts) >= 4
        and _segment_matches(parts[0], user_id)
        and _segment_matches(parts[1], customer_id)
        and _segment_matches(parts[2], pet_id)
    )


def ensure_pet_profile_key(
    key: str,
    user_id: uuid.UUID,
    customer_id: uuid.UUID,
    pet_id: uuid.UUID,
) -> str:
    """Accepts only `<pet prefix>/profile-...`; raises InvalidStorageKeyError otherwise."""
    parts = key.split("/")
    if (
        len(parts) == 4
        and _matches_pet(parts, user_id, customer_id, pet_id)
        and parts[3].startswith(PROFILE_PREFIX)
        and len(parts[3]) > len(PROFILE_PREFIX)
    ):
        return key
    raise InvalidStorageKeyError(key=key, context={"pet_id": str(pet_id)})


def ensure_visit_image_key(
    key: str,
    user_id: uuid.UUID,
    customer_id: uuid.UUID,
    pet_id: uuid.UUID,
    visit_id: uuid.UUID,
) -> str:
    """Accepts only `<pet prefix>/visits/<visit id>/<file>`."""
    parts = key.split("/")
    if (
        len(parts) == 6
        and _matches_pet(parts, user_id, customer_id, pet_id)
        and parts[3] == VISITS_DIR
        and parts[4] == str(visit_id)
        and parts[5] not in ("", ".", "..")
    ):
        return key
    raise InvalidStorageKeyError(key=key, context={"visit_id": str(visit_id)})
