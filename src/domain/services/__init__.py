"""Domain services."""

from src.domain.services.auth_service import AuthResult, AuthService
from src.domain.services.notifications import EmailSendResult, EmailService
from src.domain.services.password_reset import PasswordResetService
from src.domain.services.provisioning import ProvisioningService
from src.domain.services.setup_status import (
    AccountNotFoundError,
    SetupStatusService,
    can_access_dashboard,
    derive_setup_status,
    next_setup_step,
)

__all__ = [
    "AccountNotFoundError",
    "AuthResult",
    "AuthService",
    "EmailSendResult",
    "EmailService",
    "PasswordResetService",
    "ProvisioningService",
    "SetupStatusService",
    "can_access_dashboard",
    "derive_setup_status",
    "next_setup_step",
]
