"""Post-deployment verification checks."""

from .models import VerificationCheck, VerificationOptions, VerificationResult, VerificationSummary
from .verifier import SPA_TEST_ROUTES, DeploymentVerifier

__all__ = [
    "SPA_TEST_ROUTES",
    "DeploymentVerifier",
    "VerificationCheck",
    "VerificationOptions",
    "VerificationResult",
    "VerificationSummary",
]
