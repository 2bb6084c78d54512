"""Initial schema for accounts, role profiles, vehicles, subscriptions and catalog

Revision ID: 202610010001
Revises:
Create Date: 2026-10-01 00:01:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from src.domain.reference_data import SERVICE_TYPES

revision = "202610010001"
down_revision = None
branch_labels = None
depends_on = None

user_role_enum = sa.Enum("car_owner", "service_center", "part_seller", name="user_role")
plan_type_enum = sa.Enum("monthly", "yearly", name="plan_type")
subscription_status_enum = sa.Enum("active", "cancelled", "expired", name="subscription_status")


def _timestamps(*, with_updated: bool = True) -> list[sa.Column]:
    columns = [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        )
    ]
    if with_updated:
        columns.append(
            sa.Column(
                "updated_at",
                sa.DateTime(timezone=True),
                server_default=sa.func.now(),
                nullable=False,
            )
        )
    return columns


def _user_fk() -> sa.Column:
    return sa.Column(
        "user_id",
        sa.Integer(),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=True),
        sa.Column("name", sa.String(length=128), nullable=True),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("role", user_role_enum, nullable=False, server_default="car_owner"),
        sa.Column(
            "is_registration_complete", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        *_timestamps(),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "car_owner_profiles",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _user_fk(),
        sa.Column("name", sa.String(length=128), nullable=True),
        sa.Column("image_base64", sa.Text(), nullable=True),
        *_timestamps(with_updated=False),
    )

    op.create_table(
        "service_center_profiles",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _user_fk(),
        sa.Column("business_name", sa.String(length=255), nullable=False),
        sa.Column("address", sa.String(length=512), nullable=False),
        sa.Column("business_registration_number", sa.String(length=64), nullable=False),
        sa.Column("services_offered", sa.JSON(), nullable=False),
        sa.Column("operating_hours", sa.JSON(), nullable=False),
        sa.Column("logo", sa.Text(), nullable=True),
        *_timestamps(with_updated=False),
    )

    op.create_table(
        "part_seller_profiles",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _user_fk(),
        sa.Column("shop_name", sa.String(length=255), nullable=False),
        sa.Column("address", sa.String(length=512), nullable=False),
        sa.Column("categories_sold", sa.JSON(), nullable=False),
        sa.Column("inventory_capacity", sa.String(length=64), nullable=True),
        sa.Column("contact_person_name", sa.String(length=128), nullable=False),
        *_timestamps(with_updated=False),
    )

    op.create_table(
        "vehicles",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("vehicle_name", sa.String(length=128), nullable=False),
        sa.Column("model", sa.String(length=128), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("license_plate", sa.String(length=32), nullable=False, unique=True),
        sa.Column("color", sa.String(length=32), nullable=False, server_default="white"),
        sa.Column("vehicle_type", sa.String(length=32), nullable=False, server_default="car"),
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("image", sa.Text(), nullable=True),
        sa.Column("nickname", sa.String(length=64), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=True),
        sa.Column("status_text", sa.String(length=255), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_vehicles_user_id", "vehicles", ["user_id"])

    op.create_table(
        "subscriptions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _user_fk(),
        sa.Column("plan_type", plan_type_enum, nullable=False),
        sa.Column("status", subscription_status_enum, nullable=False, server_default="active"),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("payment_data", sa.JSON(), nullable=False),
        *_timestamps(),
    )

    service_types = op.create_table(
        "service_types",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=64), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
    )

    op.create_table(
        "shop_services",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "service_center_id",
            sa.Integer(),
            sa.ForeignKey("service_center_profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "service_type_id",
            sa.Integer(),
            sa.ForeignKey("service_types.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("unit", sa.String(length=32), nullable=False),
        sa.Column("duration", sa.Float(), nullable=True),
        sa.Column("discount", sa.Float(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_shop_services_service_center_id", "shop_services", ["service_center_id"])

    op.create_table(
        "package_templates",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "center_id",
            sa.Integer(),
            sa.ForeignKey("service_center_profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_package_templates_center_id", "package_templates", ["center_id"])

    op.create_table(
        "package_template_services",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "package_template_id",
            sa.Integer(),
            sa.ForeignKey("package_templates.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "service_id",
            sa.Integer(),
            sa.ForeignKey("shop_services.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.UniqueConstraint("package_template_id", "service_id", name="uq_package_service"),
    )
    op.create_index(
        "ix_package_template_services_package_template_id",
        "package_template_services",
        ["package_template_id"],
    )

    op.bulk_insert(service_types, SERVICE_TYPES)


def downgrade() -> None:
    op.drop_index(
        "ix_package_template_services_package_template_id",
        table_name="package_template_services",
    )
    op.drop_table("package_template_services")
    op.drop_index("ix_package_templates_center_id", table_name="package_templates")
    op.drop_table("package_templates")
    op.drop_index("ix_shop_services_service_center_id", table_name="shop_services")
    op.drop_table("shop_services")
    op.drop_table("service_types")
    op.drop_table("subscriptions")
    op.drop_index("ix_vehicles_user_id", table_name="vehicles")
    op.drop_table("vehicles")
    op.drop_table("part_seller_profiles")
    op.drop_table("service_center_profiles")
    op.drop_table("car_owner_profiles")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

    bind = op.get_bind()
    subscription_status_enum.drop(bind, checkfirst=True)
    plan_type_enum.drop(bind, checkfirst=True)
    user_role_enum.drop(bind, checkfirst=True)
