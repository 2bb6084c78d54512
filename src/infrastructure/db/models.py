from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class UserRole(str, enum.Enum):
    """Account role enum matching auth.Role."""

    CAR_OWNER = "car_owner"
    SERVICE_CENTER = "service_center"
    PART_SELLER = "part_seller"


class PlanType(str, enum.Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


class SubscriptionStatus(str, enum.Enum):
    """Subscription lifecycle status.

    Note: Must use name='subscription_status' in Enum() to match database enum type.
    """

    ACTIVE = "active"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class UserModel(Base):
    """SQLAlchemy model for users table.

    Role-specific rows, vehicles and the subscription are loaded with
    ``selectin`` so the setup-status checks never trigger lazy IO.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    # Google accounts have no local password
    hashed_password: Mapped[str | None] = mapped_column(String(255), nullable=True)
    name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role", values_callable=_enum_values),
        default=UserRole.CAR_OWNER,
        nullable=False,
    )
    is_registration_complete: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    car_owner_profile: Mapped[CarOwnerProfile | None] = relationship(
        back_populates="user", cascade="all,delete-orphan", uselist=False, lazy="selectin"
    )
    service_center_profile: Mapped[ServiceCenterProfile | None] = relationship(
        back_populates="user", cascade="all,delete-orphan", uselist=False, lazy="selectin"
    )
    part_seller_profile: Mapped[PartSellerProfile | None] = relationship(
        back_populates="user", cascade="all,delete-orphan", uselist=False, lazy="selectin"
    )
    vehicles: Mapped[list[Vehicle]] = relationship(
        back_populates="owner",
        cascade="all,delete-orphan",
        order_by=lambda: [Vehicle.is_primary.desc(), Vehicle.id],
        lazy="selectin",
    )
    subscription: Mapped[Subscription | None] = relationship(
        back_populates="user", cascade="all,delete-orphan", uselist=False, lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<UserModel(id={self.id}, email={self.email}, role={self.role.value})>"


class CarOwnerProfile(Base):
    __tablename__ = "car_owner_profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    image_base64: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    user: Mapped[UserModel] = relationship(back_populates="car_owner_profile")


class ServiceCenterProfile(Base):
    __tablename__ = "service_center_profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    business_name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str] = mapped_column(String(512), nullable=False)
    business_registration_number: Mapped[str] = mapped_column(String(64), nullable=False)
    services_offered: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    operating_hours: Mapped[dict[str, str]] = mapped_column(JSON, nullable=False, default=dict)
    logo: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    user: Mapped[UserModel] = relationship(back_populates="service_center_profile")


class PartSellerProfile(Base):
    __tablename__ = "part_seller_profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    shop_name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str] = mapped_column(String(512), nullable=False)
    categories_sold: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    inventory_capacity: Mapped[str | None] = mapped_column(String(64), nullable=True)
    contact_person_name: Mapped[str] = mapped_column(String(128), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    user: Mapped[UserModel] = relationship(back_populates="part_seller_profile")


class Vehicle(Base):
    __tablename__ = "vehicles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    vehicle_name: Mapped[str] = mapped_column(String(128), nullable=False)
    model: Mapped[str] = mapped_column(String(128), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    license_plate: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    color: Mapped[str] = mapped_column(String(32), nullable=False, default="white")
    vehicle_type: Mapped[str] = mapped_column(String(32), nullable=False, default="car")
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
    nickname: Mapped[str | None] = mapped_column(String(64), nullable=True)
    status: Mapped[str | None] = mapped_column(String(32), nullable=True)
    status_text: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    owner: Mapped[UserModel] = relationship(back_populates="vehicles")


class Subscription(Base):
    __tablename__ = "subscriptions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    plan_type: Mapped[PlanType] = mapped_column(
        Enum(PlanType, name="plan_type", values_callable=_enum_values), nullable=False
    )
    status: Mapped[SubscriptionStatus] = mapped_column(
        Enum(SubscriptionStatus, name="subscription_status", values_callable=_enum_values),
        default=SubscriptionStatus.ACTIVE,
        nullable=False,
    )
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    payment_data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    user: Mapped[UserModel] = relationship(back_populates="subscription")


class ServiceType(Base):
    __tablename__ = "service_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


class ShopService(Base):
    """A priced service offered by one service center."""

    __tablename__ = "shop_services"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    service_center_id: Mapped[int] = mapped_column(
        ForeignKey("service_center_profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    service_type_id: Mapped[int | None] = mapped_column(
        ForeignKey("service_types.id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[str] = mapped_column(String(32), nullable=False)
    duration: Mapped[float | None] = mapped_column(Float, nullable=True)  # minutes
    discount: Mapped[float | None] = mapped_column(Float, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    service_type: Mapped[ServiceType | None] = relationship(lazy="selectin")


class PackageTemplate(Base):
    """A bundle of a center's services sold together."""

    __tablename__ = "package_templates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    center_id: Mapped[int] = mapped_column(
        ForeignKey("service_center_profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    services: Mapped[list[PackageTemplateService]] = relationship(
        back_populates="package",
        cascade="all,delete-orphan",
        order_by="PackageTemplateService.id",
        lazy="selectin",
    )


class PackageTemplateService(Base):
    __tablename__ = "package_template_services"
    __table_args__ = (
        UniqueConstraint("package_template_id", "service_id", name="uq_package_service"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    package_template_id: Mapped[int] = mapped_column(
        ForeignKey("package_templates.id", ondelete="CASCADE"), nullable=False, index=True
    )
    service_id: Mapped[int] = mapped_column(
        ForeignKey("shop_services.id", ondelete="CASCADE"), nullable=False
    )

    package: Mapped[PackageTemplate] = relationship(back_populates="services")
    service: Mapped[ShopService] = relationship(lazy="selectin")


__all__ = [
    "UserRole",
    "PlanType",
    "SubscriptionStatus",
    "UserModel",
    "CarOwnerProfile",
    "ServiceCenterProfile",
    "PartSellerProfile",
    "Vehicle",
    "Subscription",
    "ServiceType",
    "ShopService",
    "PackageTemplate",
    "PackageTemplateService",
]
