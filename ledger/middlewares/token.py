"""Middleware for actor authentication"""

from fastapi import Depends, Header

from ledger.errors.token import TokenMissing
from ledger.services.token import TokenService


def get_actor_from_token(
    x_token: str | None = Header(
        default=None,
        description="API token identifying the actor",
    ),
    token_service: TokenService = Depends(),
) -> str:
    if not x_token:
        raise TokenMissing
    return token_service.get_actor_from_token(x_token)
