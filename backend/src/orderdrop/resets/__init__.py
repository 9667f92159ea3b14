"""Reset workflow: buyer restart requests and seller confirmations."""

from .service import ResetConfirmation, ResetService
from .tokens import ResetTokenSigner, build_reset_link

__all__ = ["ResetConfirmation", "ResetService", "ResetTokenSigner", "build_reset_link"]
