import json
import time

from cryptography.fernet import Fernet


class AccessTokenIssuer:
    """Issues opaque access tokens for a verified (user, address) pair."""

    def __init__(self, key: str | bytes, *, ttl_seconds: int = 3600):
        if isinstance(key, str):
            key = key.encode("utf-8")
        self._fernet = Fernet(key)
        self._ttl = ttl_seconds

    def issue(self, *, address: str, user: str) -> str:
        data = {"address": address, "user": user, "iat": int(time.time())}
        raw = json.dumps(data, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        return self._fernet.encrypt(raw).decode("utf-8")

    def read(self, token: str) -> dict:
        # raises cryptography.fernet.InvalidToken when expired or tampered
        raw = self._fernet.decrypt(token.encode("utf-8"), ttl=self._ttl)
        return json.loads(raw.decode("utf-8"))
