"""Token service. Issues and verifies signed actor tokens.

Tokens are normally minted by the surrounding ERP's auth component, which shares
the secret key. The ledger only needs the actor reference to stamp `created_by`.
"""

import logging
from datetime import datetime, timezone

import jwt
from fastapi import Depends

from ledger.config import Config, get_config
from ledger.errors.token import TokenInvalid

logger = logging.getLogger(__name__)


class TokenService:
    ALGORITHM = "HS256"

    def __init__(self, config: Config = Depends(get_config)):
        self.config = config

    def issue_token(self, actor: str) -> str:
        """Generate a new signed token with the actor reference and current timestamp in it."""
        data = {
            "a": actor,
            "d": int(datetime.now(timezone.utc).timestamp()),
        }
        return jwt.encode(data, self.config.secret_key, algorithm=self.ALGORITHM)

    def get_actor_from_token(self, token: str) -> str:
        """Verify the token and get the actor reference from its contents"""
        try:
            payload: dict[str, str] = jwt.decode(
                token, self.config.secret_key, algorithms=[self.ALGORITHM]
            )
        except jwt.InvalidTokenError:
            logger.debug("Rejected token that failed signature check")
            raise TokenInvalid
        actor = payload.get("a")
        if not actor:
            raise TokenInvalid
        return str(actor)
