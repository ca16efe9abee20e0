import time
from flask import current_app
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from redis import Redis
from supabase import create_client
from eduportal.data_service import DataService
from utils.logging import log_rate_limit_violation

cors = CORS()
jwt = JWTManager()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200000 per day", "6000 per hour"],
    on_breach=log_rate_limit_violation
)


class TokenBlocklist:
    """
    Revoked JWT ids until their token would have expired anyway.

    Kept in Redis when REDIS_URL is set. The in-process fallback is only
    seen by the worker that handled the logout, so deployments running
    more than one worker need Redis.
    """

    KEY_PREFIX = "eduportal:blocklist:"

    def __init__(self, clock=time.time):
        self._redis = None
        self._local = {}
        self._clock = clock

    def init_app(self, app):
        url = app.config.get("REDIS_URL")
        self._redis = Redis.from_url(url) if url else None
        self._local = {}
        app.extensions["token_blocklist"] = self

    def add(self, jti, expires_in):
        ttl = max(int(expires_in), 1)
        if self._redis is not None:
            self._redis.set(self.KEY_PREFIX + jti, "1", ex=ttl)
            return
        now = self._clock()
        self._prune(now)
        self._local[jti] = now + ttl

    def _prune(self, now):
        expired = [jti for jti, expires_at in self._local.items() if expires_at <= now]
        for jti in expired:
            del self._local[jti]

    def __contains__(self, jti):
        if self._redis is not None:
            return bool(self._redis.exists(self.KEY_PREFIX + jti))
        expires_at = self._local.get(jti)
        return expires_at is not None and expires_at > self._clock()

    def __len__(self):
        return len(self._local)


blocklist = TokenBlocklist()


def init_data_service(app, client_factory=None):
    app.extensions["data_service"] = DataService(
        app.config.get("SUPABASE_URL"),
        app.config.get("SUPABASE_KEY"),
        client_factory=client_factory or create_client,
    )


def get_data_service():
    return current_app.extensions["data_service"]
