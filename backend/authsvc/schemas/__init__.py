from authsvc.schemas.auth import (
    SignInSchema,
    SignUpResponseSchema,
    SignUpSchema,
    TokenResponseSchema,
)

__all__ = [
    "SignInSchema",
    "SignUpResponseSchema",
    "SignUpSchema",
    "TokenResponseSchema",
]
