from authsvc.infra.hashing.werkzeug_password_hasher import WerkzeugPasswordHasher

__all__ = ["WerkzeugPasswordHasher"]
