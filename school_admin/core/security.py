import threading
from datetime import datetime, timedelta, timezone
from typing import Optional

from cachetools import TTLCache
from jose import jwt, JWTError
from jose.exceptions import ExpiredSignatureError, JWTClaimsError
from passlib.context import CryptContext

from school_admin.core.config import settings
from school_admin.core.errors import BadSignature, ExpiredToken, InvalidToken
from school_admin.core.logger import logger

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def _normalize_password(password: str) -> str:
    """
    bcrypt only looks at the first 72 bytes.
    UTF-8 safe truncate.
    """
    return password.encode("utf-8")[:72].decode("utf-8", errors="ignore")


def hash_password(password: str) -> str:
    return pwd_context.hash(_normalize_password(password))


def verify_password(password: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    try:
        return pwd_context.verify(_normalize_password(password), hashed)
    except ValueError:
        # stored value is not a recognised hash
        return False


# =====================================================
# TOKEN SERVICE
# =====================================================

class TokenService:
    """
    Issues and verifies signed access tokens.

    Successful decodes are cached per raw token for a short window so rapid
    successive requests skip the signature check. Entries are never evicted
    early: a token keeps working for at most ``cache_ttl`` seconds past its
    own expiry.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expires_minutes: int = 60,
        cache_ttl: int = 60,
        cache_maxsize: int = 10_000,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.expires_minutes = expires_minutes
        self._cache = TTLCache(maxsize=cache_maxsize, ttl=cache_ttl)
        self._lock = threading.Lock()

    def issue(self, claims: dict, expires_delta: Optional[timedelta] = None) -> str:
        to_encode = claims.copy()
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.expires_minutes))
        to_encode.update({"iat": now, "exp": expire})
        token = jwt.encode(to_encode, self.secret, algorithm=self.algorithm)
        logger.debug(f"TOKEN ISSUED | sub={claims.get('sub')}")
        return token

    def verify(self, token: str) -> dict:
        with self._lock:
            cached = self._cache.get(token)
        if cached is not None:
            return cached

        payload = self._decode(token)

        with self._lock:
            self._cache[token] = payload
        return payload

    def _decode(self, token: str) -> dict:
        # parse first so malformed input is told apart from a bad signature
        try:
            jwt.get_unverified_claims(token)
        except JWTError:
            raise InvalidToken("Malformed token")

        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise ExpiredToken()
        except JWTClaimsError:
            raise InvalidToken("Invalid token claims")
        except JWTError:
            raise BadSignature()

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()


token_service = TokenService(
    secret=settings.JWT_SECRET,
    algorithm=settings.JWT_ALGORITHM,
    expires_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
    cache_ttl=settings.TOKEN_CACHE_TTL_SECONDS,
    cache_maxsize=settings.TOKEN_CACHE_MAXSIZE,
)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    return token_service.issue(data, expires_delta=expires_delta)


def decode_access_token(token: str) -> dict:
    return token_service.verify(token)
