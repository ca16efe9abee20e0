"""Capability wrapper around the hosted Supabase project.

Everything the portal persists lives in Supabase: the auth users, the
``profiles``/``attendance``/``study_materials``/``user_roles`` tables and
the ``study-materials`` storage bucket. Routes, views and the submission
workflow only talk to :class:`DataService`; the Supabase client's own
exception types never leak past it.
"""
import httpx
from supabase import AuthError as SupabaseAuthError
from supabase import PostgrestAPIError, StorageException, create_client

from eduportal.models import PortalSession

LIST_PAGE_SIZE = 100


class DataServiceError(Exception):
    """Base class for failures talking to the hosted backend."""


class FetchError(DataServiceError):
    pass


class WriteError(DataServiceError):
    pass


class StorageError(DataServiceError):
    pass


class AuthError(DataServiceError):
    pass


class DataService:
    def __init__(self, url, key, client_factory=create_client):
        self.url = url
        self.key = key
        self._client_factory = client_factory
        self._client = None

    @property
    def client(self):
        """Client authenticated with the server's own key."""
        if self._client is None:
            self._client = self._client_factory(self.url, self.key)
        return self._client

    def client_for(self, session=None):
        """Client whose table and storage calls run as ``session``'s user.

        A fresh client is built per session so one visitor's bearer token
        never ends up on a client shared with another request. The storage
        client is built lazily from ``options.headers``, so the header has
        to be in place before ``storage`` is first touched.
        """
        if session is None:
            return self.client
        client = self._client_factory(self.url, self.key)
        client.options.headers["Authorization"] = f"Bearer {session.access_token}"
        client.postgrest.auth(session.access_token)
        return client

    # -- auth -----------------------------------------------------------

    def sign_in(self, email, password):
        client = self._client_factory(self.url, self.key)
        try:
            response = client.auth.sign_in_with_password({"email": email, "password": password})
        except (SupabaseAuthError, httpx.HTTPError) as e:
            raise AuthError(str(e)) from e

        if response is None or response.session is None or response.user is None:
            raise AuthError("No session returned")

        return PortalSession(
            user_id=str(response.user.id),
            email=response.user.email,
            access_token=response.session.access_token,
            refresh_token=response.session.refresh_token,
        )

    def get_session(self, access_token, refresh_token=None):
        """Return the live session for ``access_token`` or None."""
        if not access_token:
            return None
        try:
            response = self.client.auth.get_user(access_token)
        except (SupabaseAuthError, httpx.HTTPError):
            return None

        if response is None or response.user is None:
            return None

        return PortalSession(
            user_id=str(response.user.id),
            email=response.user.email,
            access_token=access_token,
            refresh_token=refresh_token,
        )

    def sign_out(self, session):
        if session is None or not session.refresh_token:
            return
        client = self._client_factory(self.url, self.key)
        try:
            client.auth.set_session(session.access_token, session.refresh_token)
            client.auth.sign_out()
        except (SupabaseAuthError, httpx.HTTPError) as e:
            raise AuthError(str(e)) from e

    # -- tables ---------------------------------------------------------

    def select(self, table, columns="*", filters=None, order_by=None, descending=False,
               limit=None, session=None):
        query = self.client_for(session).table(table).select(columns)
        for column, value in (filters or {}).items():
            query = query.eq(column, value)
        if order_by:
            query = query.order(order_by, desc=descending)
        if limit is not None:
            query = query.limit(limit)

        try:
            response = query.execute()
        except (PostgrestAPIError, httpx.HTTPError) as e:
            raise FetchError(f"{table}: {e}") from e
        return list(response.data or [])

    def select_one(self, table, filters, columns="*", session=None):
        rows = self.select(table, columns=columns, filters=filters, limit=1, session=session)
        return rows[0] if rows else None

    def insert(self, table, row, session=None):
        try:
            response = self.client_for(session).table(table).insert(row).execute()
        except (PostgrestAPIError, httpx.HTTPError) as e:
            raise WriteError(f"{table}: {e}") from e
        data = response.data or []
        return data[0] if data else dict(row)

    # -- storage --------------------------------------------------------

    def upload(self, bucket, key, data, content_type, session=None):
        # Upsert stays off: an existing key fails the upload instead of
        # being overwritten.
        try:
            self.client_for(session).storage.from_(bucket).upload(key, data, {"content-type": content_type})
        except (StorageException, httpx.HTTPError) as e:
            raise StorageError(f"{bucket}/{key}: {e}") from e

    def public_url(self, bucket, key):
        return self.client.storage.from_(bucket).get_public_url(key)

    def remove(self, bucket, keys, session=None):
        try:
            self.client_for(session).storage.from_(bucket).remove(list(keys))
        except (StorageException, httpx.HTTPError) as e:
            raise StorageError(f"{bucket}: {e}") from e

    def list_objects(self, bucket):
        names = []
        offset = 0
        while True:
            try:
                page = self.client.storage.from_(bucket).list(
                    "", {"limit": LIST_PAGE_SIZE, "offset": offset}
                )
            except (StorageException, httpx.HTTPError) as e:
                raise StorageError(f"{bucket}: {e}") from e
            names.extend(item["name"] for item in page if item.get("name"))
            if len(page) < LIST_PAGE_SIZE:
                return names
            offset += LIST_PAGE_SIZE
