from authsvc.services.auth.dto import (
    AuthTokenConfig,
    LogoutAllOut,
    LogoutIn,
    LogoutOut,
    RefreshIn,
    SignInIn,
    SignUpIn,
    SignUpOut,
    TokenPairOut,
)
from authsvc.services.auth.service import CredentialService

__all__ = [
    "AuthTokenConfig",
    "CredentialService",
    "LogoutAllOut",
    "LogoutIn",
    "LogoutOut",
    "RefreshIn",
    "SignInIn",
    "SignUpIn",
    "SignUpOut",
    "TokenPairOut",
]
