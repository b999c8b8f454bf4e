import logging
from typing import Callable, Optional

from pydantic import ValidationError

from recipeshare.auth.storage import KeyValueStorage, StorageError
from recipeshare.client.pipeline import RequestPipeline
from recipeshare.schema import LoginRequest, Session
from recipeshare.utils.session_channel import SessionChannel

logger = logging.getLogger(__name__)

TOKEN_KEY = "auth_token"
SESSION_KEY = "current_user"
LOGIN_PATH = "/api/users/login"


class SessionDataError(ValueError):
    """The persisted session exists but cannot be parsed. Callers should force a new login."""


class SessionStore:
    """
    Owns the login session: the bearer token and minimal user identity.

    The token and the serialized session are kept under two keys in durable
    storage, and every change is published on a replay-one channel. login and
    logout are the only writers.
    """

    def __init__(self, storage: KeyValueStorage, pipeline: RequestPipeline):
        self._storage = storage
        self._pipeline = pipeline
        self._channel: SessionChannel[Session] = SessionChannel()

    @property
    def current_session(self) -> Optional[Session]:
        """The last published session, None before any login and after logout."""
        return self._channel.value

    def subscribe(self, callback: Callable[[Optional[Session]], None]) -> Callable[[], None]:
        """
        Observe session changes. The current value is delivered immediately.

        Returns:
            A function that cancels the subscription.
        """
        return self._channel.subscribe(callback)

    async def login(self, credentials: LoginRequest) -> Session:
        """
        Authenticate against the backend and persist the resulting session.

        Args:
            credentials: Email and password.

        Returns:
            The new session.

        Raises:
            ApiError: The backend rejected the login or could not be reached.
                Nothing is persisted.
            ValidationError: The login response is not a usable session
                (e.g. missing or empty token). Nothing is persisted.
            StorageError: The session could not be written. Anything written
                so far is removed again and nothing is published.
        """
        payload = await self._pipeline.post(LOGIN_PATH, json=credentials.to_payload())
        session = Session.model_validate(payload)

        try:
            self._storage.set(TOKEN_KEY, session.token)
            self._storage.set(SESSION_KEY, session.model_dump_json(by_alias=True))
        except StorageError:
            logger.error("Could not persist the session, discarding the partial login")
            self._discard_stored_session()
            raise
        logger.info(f"Login successful for user_id={session.user_id}")

        self._channel.publish(session)
        return session

    def logout(self) -> None:
        """Forget the session. Never raises, whatever the prior state."""
        self._discard_stored_session()
        logger.info("Logged out")
        self._channel.publish(None)

    def _discard_stored_session(self) -> None:
        for key in (TOKEN_KEY, SESSION_KEY):
            try:
                self._storage.remove(key)
            except StorageError as e:
                logger.error(f"Could not remove '{key}' from session storage: {e}")

    def get_token(self) -> Optional[str]:
        return self._storage.get(TOKEN_KEY)

    def is_logged_in(self) -> bool:
        return bool(self.get_token())

    def get_current_user_id(self) -> Optional[int]:
        """
        Read the user id from the persisted session.

        Returns:
            The user id, or None when no session is stored.

        Raises:
            SessionDataError: The stored session is malformed. This is not
                treated as "logged out"; the caller decides how to recover.
        """
        raw = self._storage.get(SESSION_KEY)
        if raw is None:
            return None

        try:
            session = Session.model_validate_json(raw)
        except ValidationError as e:
            # only the error types: the stored value contains the token
            error_types = ", ".join(sorted({err["type"] for err in e.errors()}))
            logger.error(f"Stored session is corrupted: {error_types}")
            raise SessionDataError(f"Stored session data is corrupted ({error_types})") from None
        return session.user_id
