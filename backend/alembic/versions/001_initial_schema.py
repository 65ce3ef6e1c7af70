"""Initial VetDesk schema

Revision ID: 001
Revises: None
Create Date: 2025-08-01 00:00:00.000000+00:00

What:  Creates users, sessions, customers, pets, treatments, visits and the
       visit_treatments / visit_notes / visit_images tables, with the enum
       types and indexes used by the ownership and dashboard queries.
How:   PostgreSQL-specific types and server defaults (gen_random_uuid(),
       CURRENT_TIMESTAMP); the ORM models carry the portable equivalents.

Rollback: downgrade() drops everything (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

pet_type = postgresql.ENUM("dog", "cat", "other", name="pet_type", create_type=False)
pet_gender = postgresql.ENUM("male", "female", name="pet_gender", create_type=False)
visit_status = postgresql.ENUM(
    "scheduled", "completed", "cancelled", name="visit_status", create_type=False
)


def _id() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
    )


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.TIMESTAMP(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def _is_deleted() -> sa.Column:
    return sa.Column("is_deleted", sa.Boolean(), server_default=sa.false(), nullable=False)


def _fk(name: str, target: str, ondelete: str = "CASCADE") -> sa.Column:
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey(target, ondelete=ondelete),
        nullable=False,
    )


def upgrade() -> None:
    bind = op.get_bind()
    pet_type.create(bind, checkfirst=True)
    pet_gender.create(bind, checkfirst=True)
    visit_status.create(bind, checkfirst=True)

    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="users_email_key"),
    )

    op.create_table(
        "sessions",
        sa.Column("id", sa.String(64), nullable=False, comment="SHA-256 of the cookie token"),
        _fk("user_id", "users.id"),
        _timestamp("created_at"),
        _timestamp("last_accessed_at"),
        sa.Column("expires_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("session_user_idx", "sessions", ["user_id"])

    op.create_table(
        "customers",
        _id(),
        _fk("user_id", "users.id"),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        _is_deleted(),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("customer_user_idx", "customers", ["user_id"])

    op.create_table(
        "pets",
        _id(),
        _fk("customer_id", "customers.id"),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("type", pet_type, nullable=False),
        sa.Column("gender", pet_gender, nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("breed", sa.String(200), nullable=True),
        sa.Column("is_sterilized", sa.Boolean(), nullable=True),
        sa.Column("is_castrated", sa.Boolean(), nullable=True),
        sa.Column("image_key", sa.Text(), nullable=True, comment="Object-storage key of the profile image"),
        _is_deleted(),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("pet_customer_idx", "pets", ["customer_id"])

    op.create_table(
        "treatments",
        _id(),
        _fk("user_id", "users.id"),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("price_cents", sa.Integer(), nullable=True),
        sa.Column("default_interval_days", sa.Integer(), nullable=True),
        _is_deleted(),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("treatment_user_idx", "treatments", ["user_id"])

    op.create_table(
        "visits",
        _id(),
        _fk("customer_id", "customers.id"),
        _fk("pet_id", "pets.id"),
        sa.Column("status", visit_status, server_default=sa.text("'scheduled'"), nullable=False),
        sa.Column("scheduled_start_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("scheduled_end_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("completed_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("title", sa.String(300), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        _is_deleted(),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("visit_pet_idx", "visits", ["pet_id"])
    op.create_index("visit_customer_idx", "visits", ["customer_id"])
    op.create_index("visit_status_idx", "visits", ["status"])
    op.create_index("visit_start_idx", "visits", ["scheduled_start_at"])

    op.create_table(
        "visit_treatments",
        _id(),
        _fk("visit_id", "visits.id"),
        _fk("treatment_id", "treatments.id", ondelete="RESTRICT"),
        sa.Column("price_cents", sa.Integer(), nullable=True),
        sa.Column("next_due_date", sa.Date(), nullable=True),
        _is_deleted(),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("visit_treatment_visit_idx", "visit_treatments", ["visit_id"])

    op.create_table(
        "visit_notes",
        _id(),
        _fk("visit_id", "visits.id"),
        sa.Column("note", sa.Text(), nullable=False),
        _is_deleted(),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("visit_note_visit_idx", "visit_notes", ["visit_id"])

    op.create_table(
        "visit_images",
        _id(),
        _fk("visit_id", "visits.id"),
        sa.Column("storage_key", sa.Text(), nullable=False),
        sa.Column("original_name", sa.String(255), nullable=True),
        sa.Column("content_type", sa.String(100), nullable=True),
        _is_deleted(),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("visit_image_visit_idx", "visit_images", ["visit_id"])


def downgrade() -> None:
    for index, table in (
        ("visit_image_visit_idx", "visit_images"),
        ("visit_note_visit_idx", "visit_notes"),
        ("visit_treatment_visit_idx", "visit_treatments"),
    ):
        op.drop_index(index, table_name=table)
        op.drop_table(table)

    for index in ("visit_start_idx", "visit_status_idx", "visit_customer_idx", "visit_pet_idx"):
        op.drop_index(index, table_name="visits")
    op.drop_table("visits")

    for index, table in (
        ("treatment_user_idx", "treatments"),
        ("pet_customer_idx", "pets"),
        ("customer_user_idx", "customers"),
        ("session_user_idx", "sessions"),
    ):
        op.drop_index(index, table_name=table)
        op.drop_table(table)
    op.drop_table("users")

    bind = op.get_bind()
    visit_status.drop(bind, checkfirst=True)
    pet_gender.drop(bind, checkfirst=True)
    pet_type.drop(bind, checkfirst=True)
