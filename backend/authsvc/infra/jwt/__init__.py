from authsvc.infra.jwt.flask_jwt_token_signer import FlaskJWTTokenSigner

__all__ = ["FlaskJWTTokenSigner"]
