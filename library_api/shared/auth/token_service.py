from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from library_api.shared.logger import JohnWickLogger

BEARER_PREFIX = "bearer "


class TokenService:
    """Issues and verifies signed bearer tokens (JWT)."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl_seconds: int = 3600,
        logger: Optional[JohnWickLogger] = None,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.ttl_seconds = ttl_seconds
        self.logger = logger or JohnWickLogger(name="TokenService")

    def issue(self, claims: Dict[str, Any], ttl: Optional[int] = None) -> str:
        now = datetime.now(timezone.utc)
        payload = dict(claims)
        payload["iat"] = now
        payload["exp"] = now + timedelta(seconds=self.ttl_seconds if ttl is None else ttl)
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Optional[Dict[str, Any]]:
        """Return the token's claims, or None when it is expired, forged or malformed."""
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            self.logger.info("Rejected expired token")
        except jwt.InvalidTokenError as exc:
            self.logger.warning("Rejected invalid token", extra={"error": str(exc)})
        return None

    def claims_from_header(self, authorization: Optional[str]) -> Optional[Dict[str, Any]]:
        """Verify the credential carried by an ``Authorization: Bearer ...`` header."""
        if not authorization or not authorization.lower().startswith(BEARER_PREFIX):
            return None
        return self.verify(authorization[len(BEARER_PREFIX):].strip())
