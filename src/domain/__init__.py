from src.domain.models import (
    SETUP_DETAILS_ROUTE,
    SETUP_PAYMENT_ROUTE,
    SetupStatus,
    SetupStep,
    User,
)

__all__ = [
    "SETUP_DETAILS_ROUTE",
    "SETUP_PAYMENT_ROUTE",
    "SetupStatus",
    "SetupStep",
    "User",
]
