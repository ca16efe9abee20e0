import io
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from supabase import AuthApiError, PostgrestAPIError, StorageException

from eduportal import create_app
from eduportal.config import TestingConfig
from eduportal.data_service import DataService
from eduportal.models import PortalSession

SUPABASE_URL = TestingConfig.SUPABASE_URL
PDF_HEADER = b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n1 0 obj\n<< /Type /Catalog >>\nendobj\n"
PNG_HEADER = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"


def pdf_bytes(size):
    return PDF_HEADER + b"0" * max(size - len(PDF_HEADER), 0)


class FakeBackend:
    """In-memory stand-in for one hosted Supabase project."""

    def __init__(self):
        self.tables = {"profiles": [], "attendance": [], "study_materials": [], "user_roles": []}
        self.buckets = {"study-materials": {}}
        self.users = {}
        self.live_tokens = {}
        self.calls = []
        self.fail_selects = set()
        self.fail_inserts = set()
        self.fail_uploads = False
        self.fail_removes = False

    def add_user(self, email, password, user_id=None):
        user_id = user_id or str(uuid.uuid4())
        self.users[email] = (password, user_id)
        return user_id

    def issue_token(self, user_id, email):
        token = f"sb-access-{uuid.uuid4().hex}"
        self.live_tokens[token] = (user_id, email)
        return token

    def network_calls(self, kind=None):
        return [c for c in self.calls if kind is None or c[0] == kind]


class FakeQuery:
    def __init__(self, backend, table):
        self.backend = backend
        self.table = table
        self.filters = []
        self.order_by = None
        self.desc = False
        self.row_limit = None
        self.row = None

    def select(self, columns="*"):
        self.columns = columns
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self.order_by = column
        self.desc = desc
        return self

    def limit(self, n):
        self.row_limit = n
        return self

    def insert(self, row):
        self.row = dict(row)
        return self

    def execute(self):
        if self.row is not None:
            self.backend.calls.append(("insert", self.table, self.row))
            if self.table in self.backend.fail_inserts:
                raise PostgrestAPIError({"message": "permission denied", "code": "42501"})
            stored = {
                "id": str(uuid.uuid4()),
                "uploaded_at": datetime.now(timezone.utc).isoformat(),
                **self.row,
            }
            self.backend.tables.setdefault(self.table, []).append(stored)
            return SimpleNamespace(data=[dict(stored)])

        self.backend.calls.append(("select", self.table, tuple(self.filters)))
        if self.table in self.backend.fail_selects:
            raise PostgrestAPIError({"message": "relation does not exist", "code": "42P01"})
        rows = [
            r for r in self.backend.tables.get(self.table, [])
            if all(r.get(col) == val for col, val in self.filters)
        ]
        if self.order_by:
            rows = sorted(rows, key=lambda r: r[self.order_by], reverse=self.desc)
        if self.row_limit is not None:
            rows = rows[:self.row_limit]
        return SimpleNamespace(data=[dict(r) for r in rows])


class FakeBucket:
    def __init__(self, backend, name, authorization=None):
        self.backend = backend
        self.name = name
        self.authorization = authorization

    @property
    def objects(self):
        return self.backend.buckets.setdefault(self.name, {})

    def upload(self, path, file, file_options=None):
        self.backend.calls.append(("upload", self.name, path, self.authorization))
        if self.backend.fail_uploads:
            raise StorageException({"statusCode": 500, "error": "Internal", "message": "upload failed"})
        if path in self.objects:
            raise StorageException({"statusCode": 409, "error": "Duplicate", "message": "The resource already exists"})
        self.objects[path] = (bytes(file), (file_options or {}).get("content-type"))
        return SimpleNamespace(path=path, full_path=f"{self.name}/{path}")

    def get_public_url(self, path):
        return f"{SUPABASE_URL}/storage/v1/object/public/{self.name}/{path}"

    def remove(self, paths):
        self.backend.calls.append(("remove", self.name, tuple(paths), self.authorization))
        if self.backend.fail_removes:
            raise StorageException({"statusCode": 500, "error": "Internal", "message": "remove failed"})
        for path in paths:
            self.objects.pop(path, None)
        return [{"name": p} for p in paths]

    def list(self, path=None, options=None):
        options = options or {}
        names = sorted(self.objects)
        offset = options.get("offset", 0)
        limit = options.get("limit", 100)
        return [{"name": n} for n in names[offset:offset + limit]]


class FakeStorage:
    def __init__(self, backend, headers):
        self.backend = backend
        self.headers = dict(headers)

    def from_(self, bucket):
        return FakeBucket(self.backend, bucket, self.headers.get("Authorization"))


class FakeAuth:
    def __init__(self, backend):
        self.backend = backend
        self.current = None

    def sign_in_with_password(self, credentials):
        entry = self.backend.users.get(credentials.get("email"))
        if entry is None or entry[0] != credentials.get("password"):
            raise AuthApiError("Invalid login credentials", 400, "invalid_credentials")
        user_id = entry[1]
        token = self.backend.issue_token(user_id, credentials["email"])
        self.current = token
        return SimpleNamespace(
            user=SimpleNamespace(id=user_id, email=credentials["email"]),
            session=SimpleNamespace(access_token=token, refresh_token=f"refresh-{token}"),
        )

    def get_user(self, jwt=None):
        entry = self.backend.live_tokens.get(jwt)
        if entry is None:
            raise AuthApiError("invalid JWT", 403, "bad_jwt")
        return SimpleNamespace(user=SimpleNamespace(id=entry[0], email=entry[1]))

    def set_session(self, access_token, refresh_token):
        self.current = access_token

    def sign_out(self, options=None):
        self.backend.live_tokens.pop(self.current, None)
        self.current = None


class FakePostgrest:
    def __init__(self):
        self.token = None

    def auth(self, token):
        self.token = token
        return self


class FakeSupabase:
    def __init__(self, backend, key):
        self.backend = backend
        self.options = SimpleNamespace(headers={"apiKey": key, "Authorization": f"Bearer {key}"})
        self.auth = FakeAuth(backend)
        self.postgrest = FakePostgrest()
        self._storage = None

    @property
    def storage(self):
        # Built on first use from the headers present at that moment
        if self._storage is None:
            self._storage = FakeStorage(self.backend, self.options.headers)
        return self._storage

    def table(self, name):
        return FakeQuery(self.backend, name)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def client_factory(backend):
    def factory(url, key):
        return FakeSupabase(backend, key)
    return factory


@pytest.fixture
def service(client_factory):
    return DataService(SUPABASE_URL, TestingConfig.SUPABASE_KEY, client_factory=client_factory)


@pytest.fixture
def app(client_factory, tmp_path):
    class Config(TestingConfig):
        AUDIT_LOG_FILE = str(tmp_path / "audit.log")

    app = create_app(Config, client_factory=client_factory)
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def student(backend):
    user_id = backend.add_user("ada@example.edu", "s3cret-pass")
    backend.tables["profiles"].append({
        "id": user_id,
        "full_name": "Ada King Lovelace",
        "student_id": "STU-1815",
        "email": "ada@example.edu",
    })
    token = backend.issue_token(user_id, "ada@example.edu")
    return PortalSession(user_id=user_id, email="ada@example.edu", access_token=token,
                         refresh_token=f"refresh-{token}")


@pytest.fixture
def admin(backend, student):
    backend.tables["user_roles"].append({"user_id": student.user_id, "role": "admin"})
    return student


def login(client, email="ada@example.edu", password="s3cret-pass"):
    return client.post("/auth/login", json={"email": email, "password": password})


def pdf_upload(name="notes.pdf", size=2 * 1024 * 1024, mimetype="application/pdf", data=None):
    return (io.BytesIO(data if data is not None else pdf_bytes(size)), name, mimetype)


def days_ago(n):
    return (datetime(2026, 10, 18) - timedelta(days=n)).date().isoformat()
