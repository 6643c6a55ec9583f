import logging
import secrets
import string
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Callable, Optional, Protocol

from ...config.provider import FallbackPolicy, SessionConfig
from ..sequence import LocalSequence, SequenceSource
from ..storage.cache import CacheKeyNotFound, CacheStore
from .errors import SessionNotFound, StorageUnavailable
from .record import Session, SessionLike

logger = logging.getLogger(__name__)

SUFFIX_ALPHABET = string.ascii_letters + string.digits
SUFFIX_LENGTH = 8


class RequestCarrier(Protocol):
    """Protocol for the request/response pair of one HTTP exchange."""

    def read_cookie(self, name: str) -> Optional[str]:
        """Cookie value, or None if the request has no such cookie."""
        ...

    async def read_form_field(self, name: str) -> Optional[str]:
        """Form field value, or None if absent."""
        ...

    def set_cookie(self, name: str, value: str, max_age: Optional[int], http_only: bool) -> None:
        """Set a cookie on the response."""
        ...


@dataclass
class SessionOptions:
    """Per-call options for session creation."""

    http_only: bool = False
    max_age: Optional[int] = None  # None: use SessionConfig.max_age; 0: no expiry


def _now() -> int:
    return int(datetime.now(UTC).timestamp())


def random_suffix(length: int = SUFFIX_LENGTH) -> str:
    return "".join(secrets.choice(SUFFIX_ALPHABET) for _ in range(length))


class SessionManager:
    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        store: Optional[CacheStore] = None,
        sequence: Optional[SequenceSource] = None,
        session_factory: Callable[[], SessionLike] = Session,
    ):
        """
        Initialize session manager.

        Args:
            config: Cookie/form names, identifier prefix, default max-age
            store: Cache store holding session records; None leaves every
                lifecycle operation failing with StorageUnavailable
            sequence: Source of unique numbers for identifiers
                (in-process counter if omitted)
            session_factory: Builds instances when the caller supplies none
        """
        self.config = config or SessionConfig()
        self.store = store
        self.sequence = sequence or LocalSequence()
        self.session_factory = session_factory

    def _require_store(self) -> CacheStore:
        if self.store is None:
            raise StorageUnavailable("Session storage is not configured")
        return self.store

    def _resolve_options(self, options: Optional[SessionOptions]) -> SessionOptions:
        if options is None:
            return SessionOptions(http_only=self.config.http_only, max_age=self.config.max_age)
        if options.max_age is None:
            return SessionOptions(http_only=options.http_only, max_age=self.config.max_age)
        if options.max_age < 0:
            raise ValueError(f"max_age must not be negative, got {options.max_age}")
        return options

    async def new_session_id(self) -> str:
        """
        Generate a session identifier.

        Format: <prefix><sequence as hex>_<8 random letters/digits>. The
        random suffix keeps identifiers unguessable even though the sequence
        is predictable.
        """
        sequence_id = await self.sequence.next()
        return f"{self.config.id_prefix}{sequence_id:x}_{random_suffix()}"

    async def session_id_from(self, carrier: RequestCarrier) -> str:
        """
        Resolve the session identifier of a request.

        The cookie wins whenever it is present; the form field is only
        consulted when the request has no session cookie.

        Returns:
            Identifier, or "" if the request carries none
        """
        cookie = carrier.read_cookie(self.config.cookie_name)
        if cookie is not None:
            return cookie
        return await carrier.read_form_field(self.config.form_field) or ""

    async def create(
        self,
        carrier: RequestCarrier,
        session: Optional[SessionLike] = None,
        options: Optional[SessionOptions] = None,
    ) -> SessionLike:
        """
        Create a new session.

        Args:
            carrier: Request/response to set the session cookie on
            session: Instance to initialize (built by session_factory if None)
            options: Cookie/expiry options (configured defaults if None)

        Returns:
            The initialized session

        Raises:
            StorageUnavailable: If no store is configured

        Logic:
        1. Generate identifier
        2. Reset data bag, compute expiry
        3. Persist record (with TTL when max_age > 0)
        4. Set cookie
        """
        store = self._require_store()
        options = self._resolve_options(options)
        if session is None:
            session = self.session_factory()

        session.session_id = await self.new_session_id()
        session.data = {}

        if options.max_age:
            session.expire_at = _now() + options.max_age
            await store.set_with_expiry(session.session_id, session.to_record(), options.max_age)
        else:
            session.expire_at = None
            await store.set(session.session_id, session.to_record())

        carrier.set_cookie(
            self.config.cookie_name,
            session.session_id,
            options.max_age or None,
            options.http_only,
        )
        logger.info(f"Created session {session.session_id}")
        return session

    async def find(self, carrier: RequestCarrier, session: Optional[SessionLike] = None) -> SessionLike:
        """
        Load the session identified by the request.

        Args:
            carrier: Request carrying the identifier (cookie or form field)
            session: Instance to load into (built by session_factory if None)

        Returns:
            The loaded session

        Raises:
            StorageUnavailable: If no store is configured
            SessionNotFound: If the request has no identifier, the store has
                no record for it, or the record has expired
        """
        store = self._require_store()
        session_id = await self.session_id_from(carrier)
        if not session_id:
            raise SessionNotFound("No session identifier on the request")

        try:
            record = await store.get(session_id)
        except CacheKeyNotFound as exc:
            raise SessionNotFound(f"Session {session_id} not found") from exc

        if not isinstance(record, dict):
            raise SessionNotFound(f"Session {session_id} has an unreadable record")

        expire_at = record.get("expire_at")
        if expire_at is not None and expire_at <= _now():
            raise SessionNotFound(f"Session {session_id} has expired")

        if session is None:
            session = self.session_factory()
        session.load_record(record)
        return session

    async def get_or_create(
        self,
        carrier: RequestCarrier,
        session: Optional[SessionLike] = None,
        options: Optional[SessionOptions] = None,
    ) -> SessionLike:
        """
        Load the request's session, creating one if the lookup fails.

        Which failures lead to a new session is set by
        SessionConfig.fallback_policy. StorageUnavailable always propagates.
        """
        try:
            return await self.find(carrier, session)
        except StorageUnavailable:
            raise
        except SessionNotFound as exc:
            logger.info(f"Creating session: {exc}")
        except Exception as exc:
            if self.config.fallback_policy is FallbackPolicy.NOT_FOUND:
                raise
            logger.warning(f"Session lookup failed, creating a new session instead: {exc}")
        return await self.create(carrier, session, options)

    async def save(self, session: SessionLike) -> None:
        """
        Persist the session record.

        Keeps the remaining lifetime as the store TTL when the session has
        an expiry. The cookie is left untouched.

        Raises:
            StorageUnavailable: If no store is configured
            SessionNotFound: If the session has no identifier yet
        """
        store = self._require_store()
        if not session.session_id:
            raise SessionNotFound("Session has no identifier; create or find it first")

        record = session.to_record()
        if session.expire_at is not None:
            ttl = max(session.expire_at - _now(), 1)
            await store.set_with_expiry(session.session_id, record, ttl)
        else:
            await store.set(session.session_id, record)

    async def delete(self, session: SessionLike) -> None:
        """
        Remove the session record. The cookie is left to go stale.

        Raises:
            StorageUnavailable: If no store is configured
            SessionNotFound: If the session has no identifier
        """
        store = self._require_store()
        if not session.session_id:
            raise SessionNotFound("Session has no identifier")
        await store.delete(session.session_id)
        logger.info(f"Deleted session {session.session_id}")

    async def is_logged_on(self, carrier: RequestCarrier) -> bool:
        """True if the request resolves to a stored session. Never raises."""
        if self.store is None:
            return False
        try:
            await self.find(carrier)
        except SessionNotFound as exc:
            logger.debug(f"No session: {exc}")
            return False
        except Exception as exc:
            logger.warning(f"Session check failed: {exc}")
            return False
        return True
