"""Screen-level flows built on the API wrappers."""

from .booking import BookingStep, BookingWizard
from .login import LoginFlow, validate_email
from .scope import CancelScope

__all__ = ["BookingStep", "BookingWizard", "CancelScope", "LoginFlow", "validate_email"]
