import os
from datetime import timedelta
from dotenv import load_dotenv


load_dotenv()


def _flag(name, default="false"):
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.getenv("JWT_SECRET_KEY")  # used for both Flask and JWT
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "fallback-jwt")

    SUPABASE_URL = os.getenv("SUPABASE_URL")
    SUPABASE_KEY = os.getenv("SUPABASE_KEY")
    STUDY_MATERIALS_BUCKET = os.getenv("STUDY_MATERIALS_BUCKET", "study-materials")

    MAX_MATERIAL_BYTES = 10 * 1024 * 1024  # 10 MB per study material
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16 MB request cap
    ATTENDANCE_HISTORY_LIMIT = int(os.getenv("ATTENDANCE_HISTORY_LIMIT", "10"))
    # Off keeps the uploaded blob when the metadata insert fails
    RECONCILE_ORPHANED_UPLOADS = _flag("RECONCILE_ORPHANED_UPLOADS")

    REDIS_URL = os.getenv("REDIS_URL")
    RATELIMIT_STORAGE_URI = os.getenv("REDIS_URL", "memory://")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    AUDIT_LOG_FILE = os.getenv("AUDIT_LOG_FILE", os.path.join("logs", "audit.log"))

    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=1)         # Auto-expire access token after 1 hour
    JWT_TOKEN_LOCATION = ["cookies"]
    JWT_ACCESS_COOKIE_NAME = "access_token_cookie"
    JWT_COOKIE_SECURE = True  # only over HTTPS
    JWT_COOKIE_SAMESITE = "Lax"
    JWT_COOKIE_CSRF_PROTECT = False


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    JWT_SECRET_KEY = "test-jwt-secret-with-enough-length-for-hs256"
    SUPABASE_URL = "https://example.supabase.co"
    SUPABASE_KEY = "test-anon-key"
    REDIS_URL = None
    RATELIMIT_ENABLED = False
    RATELIMIT_STORAGE_URI = "memory://"
    JWT_COOKIE_SECURE = False
    RECONCILE_ORPHANED_UPLOADS = False
