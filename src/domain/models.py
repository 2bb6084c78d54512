from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum

SETUP_DETAILS_ROUTE = "/setup/details"
SETUP_PAYMENT_ROUTE = "/setup/payment"


class SetupStep(str, Enum):
    REGISTRATION = "registration"
    PROFILE = "profile"
    PAYMENT = "payment"


@dataclass(slots=True)
class User:
    """Represents an authenticated actor within the system."""

    user_id: int
    role: str
    email: str = ""
    is_registration_complete: bool = False
    is_setup_complete: bool = False
    has_active_subscription: bool = False


@dataclass(slots=True)
class SetupStatus:
    """Onboarding verdict used by clients to gate dashboard access."""

    is_registration_complete: bool
    is_setup_complete: bool
    has_active_subscription: bool
    missing_steps: list[str] = field(default_factory=list)
    redirect_to: str | None = None

    @property
    def requires_setup(self) -> bool:
        return bool(self.missing_steps)

    def to_dict(self) -> dict:
        return asdict(self)

    def token_claims(self) -> dict[str, bool]:
        return {
            "is_registration_complete": self.is_registration_complete,
            "is_setup_complete": self.is_setup_complete,
            "has_active_subscription": self.has_active_subscription,
        }
