"""Credential issuance and verification."""

from .dto import Claims, TokenPair, TokenType, VerificationFailure
from .issuer import CredentialIssuer
from .verifier import TokenVerificationError, verify_token

__all__ = [
    "Claims",
    "CredentialIssuer",
    "TokenPair",
    "TokenType",
    "TokenVerificationError",
    "VerificationFailure",
    "verify_token",
]
