# backend/ninja_missions/identity.py
"""
Identity collaborator: credential hashing, token minting and verification.

The lifecycle engine only ever sees the CallerIdentity this module
resolves from a bearer token.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError

from ninja_missions.errors import Conflict, InvalidToken, Unauthenticated, ValidationFailed
from ninja_missions.ranks import NinjaRank
from ninja_missions.schemas import CallerIdentity, NinjaRecord
from ninja_missions.store import MissionStore

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
AVATAR_URL = "https://api.dicebear.com/7.x/avataaars/svg?seed={username}"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        # unrecognized hash format
        return False


def parse_rank(value: Optional[str]) -> NinjaRank:
    """Registration rank; anything unknown falls back to Academy."""
    try:
        return NinjaRank(value)
    except ValueError:
        return NinjaRank.ACADEMY


class IdentityService:
    def __init__(self, store: MissionStore, secret: str, expire_hours: int = 24):
        self.store = store
        self.secret = secret
        self.expire = timedelta(hours=expire_hours)

    def issue_token(self, ninja: NinjaRecord) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "sub": str(ninja.id),
            "username": ninja.username,
            "rank": ninja.rank.value,
            "iat": now,
            "exp": now + self.expire,
        }
        return jwt.encode(claims, self.secret, algorithm=ALGORITHM)

    def resolve_caller(self, token: Optional[str]) -> CallerIdentity:
        if not token:
            raise Unauthenticated()
        try:
            claims = jwt.decode(token, self.secret, algorithms=[ALGORITHM])
            return CallerIdentity(id=int(claims["sub"]), username=claims["username"], rank=claims["rank"])
        except (JWTError, KeyError, ValueError, ValidationError) as exc:
            logger.info(f"[auth] rejected token: {type(exc).__name__}")
            raise InvalidToken() from None

    def register(self, username: Optional[str], password: Optional[str], rank: Optional[str] = None) -> Tuple[str, NinjaRecord]:
        if not username or not password:
            raise ValidationFailed("Username and password are required")
        if self.store.find_credentials(username) is not None:
            raise ValidationFailed("Username already taken")

        try:
            ninja = self.store.create_ninja(
                username=username,
                password_hash=hash_password(password),
                rank=parse_rank(rank),
                avatar_url=AVATAR_URL.format(username=username),
            )
        except Conflict:
            # lost a race with a concurrent registration of the same name
            raise ValidationFailed("Username already taken") from None
        logger.info(f"[auth] registered ninja id={ninja.id} rank={ninja.rank.value}")
        return self.issue_token(ninja), ninja

    def login(self, username: Optional[str], password: Optional[str]) -> Tuple[str, NinjaRecord]:
        if not username or not password:
            raise ValidationFailed("Missing credentials")
        found = self.store.find_credentials(username)
        if found is None or not verify_password(password, found[1]):
            raise Unauthenticated("Invalid username or password")
        ninja = found[0]
        return self.issue_token(ninja), ninja
