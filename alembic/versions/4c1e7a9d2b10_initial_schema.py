"""Initial schema: organizations, locations, roles, employees, shifts

Revision ID: 4c1e7a9d2b10
Revises:
Create Date: 2026-03-02 10:12:41.503118
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "4c1e7a9d2b10"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SHIFT_ENUM = "shift_status"


def upgrade() -> None:
    op.create_table(
        "organizations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("locale", sa.String(length=16), nullable=True),
        sa.Column("currency", sa.String(length=8), nullable=True),
        sa.Column("timezone", sa.String(length=64), nullable=True),
        sa.Column("week_starts_on", sa.String(length=3), nullable=True),
        sa.Column("default_shift_start", sa.String(length=5), nullable=True),
        sa.Column("default_shift_end", sa.String(length=5), nullable=True),
        sa.Column("weekly_budget_limit", sa.Float(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "locations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("org_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("timezone", sa.String(length=64), nullable=False),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("org_id", "name", name="uq_location_org_name"),
    )
    op.create_index(op.f("ix_locations_org_id"), "locations", ["org_id"], unique=False)

    op.create_table(
        "job_roles",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("org_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("hourly_wage_default", sa.Float(), nullable=True),
        sa.CheckConstraint("hourly_wage_default IS NULL OR hourly_wage_default >= 0", name="ck_jobrole_wage_nonneg"),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("org_id", "name", name="uq_jobrole_org_name"),
    )
    op.create_index(op.f("ix_job_roles_org_id"), "job_roles", ["org_id"], unique=False)

    op.create_table(
        "employees",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("org_id", sa.Integer(), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("location_id", sa.Integer(), nullable=True),
        sa.Column("role_id", sa.Integer(), nullable=True),
        sa.Column("hourly_rate", sa.Float(), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.CheckConstraint("hourly_rate IS NULL OR hourly_rate >= 0", name="ck_employee_rate_nonneg"),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["location_id"], ["locations.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["role_id"], ["job_roles.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_employees_org_id"), "employees", ["org_id"], unique=False)
    op.create_index(op.f("ix_employees_location_id"), "employees", ["location_id"], unique=False)

    status_col = sa.Enum("open", "closed", "cancelled", name=SHIFT_ENUM)

    op.create_table(
        "shifts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("org_id", sa.Integer(), nullable=False),
        sa.Column("location_id", sa.Integer(), nullable=False),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("role_id", sa.Integer(), nullable=False),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("break_minutes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("hourly_wage", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", status_col, nullable=False, server_default="open"),
        sa.Column("cancel_reason", sa.Text(), nullable=True),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("client_ref", sa.String(length=64), nullable=True),
        sa.CheckConstraint("end_at > start_at", name="ck_shift_end_after_start"),
        sa.CheckConstraint("break_minutes >= 0", name="ck_shift_break_nonneg"),
        sa.CheckConstraint("hourly_wage >= 0", name="ck_shift_wage_nonneg"),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["location_id"], ["locations.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["role_id"], ["job_roles.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("org_id", "client_ref", name="uq_shift_org_client_ref"),
    )
    op.create_index(op.f("ix_shifts_org_id"), "shifts", ["org_id"], unique=False)
    op.create_index(op.f("ix_shifts_location_id"), "shifts", ["location_id"], unique=False)
    op.create_index(op.f("ix_shifts_employee_id"), "shifts", ["employee_id"], unique=False)
    op.create_index(
        "ix_shifts_org_location_start", "shifts", ["org_id", "location_id", "start_at"], unique=False
    )


def downgrade() -> None:
    op.drop_index("ix_shifts_org_location_start", table_name="shifts")
    op.drop_index(op.f("ix_shifts_employee_id"), table_name="shifts")
    op.drop_index(op.f("ix_shifts_location_id"), table_name="shifts")
    op.drop_index(op.f("ix_shifts_org_id"), table_name="shifts")
    op.drop_table("shifts")
    sa.Enum(name=SHIFT_ENUM).drop(op.get_bind(), checkfirst=True)

    op.drop_index(op.f("ix_employees_location_id"), table_name="employees")
    op.drop_index(op.f("ix_employees_org_id"), table_name="employees")
    op.drop_table("employees")
    op.drop_index(op.f("ix_job_roles_org_id"), table_name="job_roles")
    op.drop_table("job_roles")
    op.drop_index(op.f("ix_locations_org_id"), table_name="locations")
    op.drop_table("locations")
    op.drop_table("organizations")
