# SPDX-License-Identifier: Apache-2.0

"""
Authentication service for JWT token management.

This module issues and validates RS256-signed access tokens carrying the
user's identity and roles. Keys come from the environment or, in development,
from a freshly generated RSA key pair.
"""

import os
import uuid
import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, Tuple
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from opentelemetry import trace
import logging

from ..models.entities import User

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Raised when a token cannot be issued."""
    pass


class TokenValidationError(Exception):
    """Raised when token validation fails."""
    pass


def generate_key_pair() -> Tuple[str, str]:
    """Generate an RSA key pair as (private PEM, public PEM)."""
    private_key = rsa.generate_private_key(
        public_exponent=65537,
        key_size=2048
    )

    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption()
    ).decode('utf-8')

    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo
    ).decode('utf-8')

    return private_pem, public_pem


class AuthService:
    """
    JWT authentication service with RS256 signing.

    Args:
        private_key: RS256 private key for token signing (PEM format)
        public_key: RS256 public key for token verification (PEM format)
        access_token_expire_minutes: Lifetime of access tokens
    """

    def __init__(
        self,
        private_key: Optional[str] = None,
        public_key: Optional[str] = None,
        access_token_expire_minutes: Optional[int] = None
    ):
        private_key = private_key or os.getenv("JWT_PRIVATE_KEY")
        public_key = public_key or os.getenv("JWT_PUBLIC_KEY")

        if not private_key or not public_key:
            # Both halves must come from the same pair
            logger.warning("JWT key pair not configured, generating development key pair")
            private_key, public_key = generate_key_pair()

        self.private_key = private_key
        self.public_key = public_key
        self.algorithm = "RS256"
        self.access_token_expire_minutes = access_token_expire_minutes or int(
            os.getenv("JWT_ACCESS_TOKEN_EXPIRES", "15")
        )

    def create_access_token(self, user: User) -> Dict[str, Any]:
        """
        Issue an access token for a user.

        Args:
            user: User the token identifies

        Returns:
            Dictionary containing access_token and metadata
        """
        with tracer.start_as_current_span("auth.create_access_token") as span:
            span.set_attributes({
                "auth.operation": "create_access_token",
                "user.id": user.id
            })

            now = datetime.now(timezone.utc)
            expires_at = now + timedelta(minutes=self.access_token_expire_minutes)

            payload = {
                "sub": user.id,
                "firstname": user.firstname,
                "lastname": user.lastname,
                "roles": list(user.roles),
                "type": "access",
                "jti": str(uuid.uuid4()),
                "iat": now,
                "exp": expires_at
            }

            try:
                access_token = jwt.encode(payload, self.private_key, algorithm=self.algorithm)
            except (ValueError, TypeError, jwt.PyJWTError) as e:
                span.set_attribute("auth.token_created", "error")
                logger.error(f"Token generation failed: {str(e)}")
                raise AuthenticationError(f"Failed to generate token: {str(e)}")

            span.set_attribute("auth.token_created", "success")
            logger.info(
                "Access token issued",
                extra={
                    "user_id": user.id,
                    "expires_at": expires_at.isoformat()
                }
            )

            return {
                "access_token": access_token,
                "token_type": "Bearer",
                "expires_in": self.access_token_expire_minutes * 60,
                "expires_at": expires_at.isoformat()
            }

    def validate_token(self, token: str, token_type: str = "access") -> Dict[str, Any]:
        """
        Validate and decode a JWT token.

        Args:
            token: JWT token string to validate
            token_type: Expected token type

        Returns:
            Decoded token payload

        Raises:
            TokenValidationError: If token is invalid, expired or of another type
        """
        with tracer.start_as_current_span("auth.validate_token") as span:
            span.set_attributes({
                "auth.operation": "validate_token",
                "auth.token_type": token_type
            })

            try:
                payload = jwt.decode(
                    token,
                    self.public_key,
                    algorithms=[self.algorithm],
                    options={"verify_exp": True, "require": ["sub", "exp", "iat"]}
                )
            except jwt.ExpiredSignatureError:
                span.set_attribute("auth.validation_result", "expired")
                logger.warning("Token validation failed: token expired")
                raise TokenValidationError("Token has expired")
            except jwt.InvalidTokenError as e:
                span.set_attribute("auth.validation_result", "invalid")
                logger.warning(f"Token validation failed: {str(e)}")
                raise TokenValidationError(f"Invalid token: {str(e)}")

            if payload.get("type") != token_type:
                span.set_attribute("auth.validation_result", "wrong_type")
                raise TokenValidationError(f"Invalid token type. Expected {token_type}")

            span.set_attributes({
                "auth.validation_result": "success",
                "user.id": payload.get("sub")
            })

            logger.debug(
                "Token validated successfully",
                extra={
                    "user_id": payload.get("sub"),
                    "token_type": token_type
                }
            )

            return payload
