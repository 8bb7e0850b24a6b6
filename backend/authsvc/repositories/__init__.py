from authsvc.repositories.base import BaseRepository
from authsvc.repositories.refresh_token import RefreshTokenRepository
from authsvc.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "RefreshTokenRepository",
    "UserRepository",
]
