"""
application.services.session - Authentication state for the whole client.

SessionManager is the single authority for ``user``/``token``/``loading``
and the only writer of the ``token`` and ``user`` credential slots. One
instance is created by the ServiceFactory and handed to every feature
service that needs the bearer token; there is no module-level session.

State machine::

    BOOTSTRAPPING --bootstrap()--> UNAUTHENTICATED | AUTHENTICATED
    UNAUTHENTICATED --login()--> AUTHENTICATED
    AUTHENTICATED --logout() / 401 on an authenticated call--> UNAUTHENTICATED

signup() never changes state: a new account still has to log in.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Mapping, Optional, Union

from greenhero.domain.entities import User
from greenhero.domain.exceptions import (
    AuthenticationError,
    CredentialStoreError,
    InvalidRequestError,
    NotAuthenticatedError,
    SessionBusyError,
    SessionExpiredError,
    SignupError,
)
from greenhero.domain.models import ApiResponse, Notice, Route, SessionSnapshot, SessionState
from greenhero.domain.ports import TOKEN_KEY, USER_KEY, ApiClient, CredentialStore
from greenhero.application.dto import (
    LoginCredentials,
    PasswordResetRequest,
    SignupForm,
    parse_form,
)

logger = logging.getLogger(__name__)

SessionListener = Callable[[SessionSnapshot], None]


class SessionManager:
    """Owns the client session and its persisted copy.

    Persistence order:
        login:  credential store first, then memory. A failed write leaves
                the session unauthenticated.
        logout: memory first, then the store (best-effort), so observers see
                the logged-out state even if deletion fails.

    Concurrency: a second login while one is outstanding is rejected, and
    a logout during a login bumps the generation so the late login result
    is discarded instead of resurrecting the session.
    """

    def __init__(self, api: ApiClient, store: CredentialStore):
        self._api = api
        self._store = store

        self._user: Optional[User] = None
        self._token: Optional[str] = None
        self._loading = True
        self._bootstrapped = False

        self._login_in_flight = False
        self._generation = 0
        self._listeners: list[SessionListener] = []

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def user(self) -> Optional[User]:
        return self._user

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def state(self) -> SessionState:
        if not self._bootstrapped:
            return SessionState.BOOTSTRAPPING
        if self._token is not None:
            return SessionState.AUTHENTICATED
        return SessionState.UNAUTHENTICATED

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            user=self._user,
            token=self._token,
            loading=self._loading,
            state=self.state,
        )

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Call ``listener`` with a snapshot on every change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Session listener %r failed", listener)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def bootstrap(self) -> SessionSnapshot:
        """Load the persisted session into memory. No network call is made.

        A stored token is trusted without revalidation. A stored user that
        cannot be parsed, or that has no token next to it, is discarded
        (logged, never raised). Memory is only touched once both slots were
        read. ``loading`` ends up False whatever happens.
        """
        try:
            token = await self._store.get_item(TOKEN_KEY) or None
            raw_user = await self._store.get_item(USER_KEY)
        except CredentialStoreError as e:
            logger.error("Failed to load stored session: %s", e)
        else:
            if raw_user and token is None:
                logger.warning("Discarding stored user record without a token")
                raw_user = None
            self._token = token
            self._user = _parse_user(raw_user) if raw_user else None
        finally:
            self._loading = False
            self._bootstrapped = True
            self._notify()

        logger.info("Session bootstrapped: %s", self.state.value)
        return self.snapshot()

    async def login(self, email: str, password: str) -> Notice:
        """Authenticate against POST /auth/login and persist the session.

        Empty strings are not rejected here; screens validate their own
        input before calling.

        Raises:
            AuthenticationError: Backend rejected the credentials (message is
                                 the server ``message`` field when present),
                                 or answered without a token/user.
            TransportError:      The backend could not be reached.
            SessionBusyError:    Another login is in flight, or a logout
                                 happened while this one was waiting.
            CredentialStoreError: The session could not be persisted.
        """
        if self._login_in_flight:
            raise SessionBusyError("A login is already in progress.")

        body = parse_form(LoginCredentials, {"email": email, "password": password})
        generation = self._generation
        self._login_in_flight = True
        self._loading = True
        self._notify()
        try:
            response = await self._api.request("POST", "/auth/login", json=body.model_dump())
            token, user, raw_user = _read_login_payload(response)

            if generation != self._generation:
                raise SessionBusyError("Login was cancelled by logout.")

            await self._persist(token, raw_user)

            if generation != self._generation:
                await self._forget_persisted()
                raise SessionBusyError("Login was cancelled by logout.")

            self._token = token
            self._user = user
            # a login that beats bootstrap() still ends the bootstrapping state
            self._bootstrapped = True
            logger.info("User %s logged in", user.id or user.email)
        finally:
            self._login_in_flight = False
            self._loading = False
            self._notify()

        return Notice(title="Success", message="Welcome back!", route=Route.HOME)

    async def signup(self, form: Union[SignupForm, Mapping[str, Any]]) -> Notice:
        """Register a new account via POST /auth/signup.

        Does NOT log the user in: on success the caller is sent to the
        login screen and the session is left exactly as it was.

        Raises:
            InvalidRequestError: ``form`` failed local validation.
            SignupError:         Backend rejected the registration.
            TransportError:      The backend could not be reached.
        """
        if not isinstance(form, SignupForm):
            form = parse_form(SignupForm, form)

        response = await self._api.request("POST", "/auth/signup", json=form.to_body())
        if not response.ok:
            raise SignupError(
                response.message("msg", "errors", "message"),
                status=response.status,
                body=response.body,
            )

        logger.info("Account created for %s", form.email)
        return Notice(
            title="Success",
            message="Account created successfully.",
            route=Route.LOGIN,
        )

    async def forgot_password(self, email: str) -> Notice:
        """Ask the backend to e-mail a password reset link.

        The reply is shown whatever the status, so the client does not
        reveal whether an address is registered.
        """
        email = email.strip()
        if not email:
            raise InvalidRequestError("Enter the email address of your account.")

        body = parse_form(PasswordResetRequest, {"email": email})
        response = await self._api.request(
            "POST", "/auth/forgot-password", json=body.model_dump(),
        )
        return Notice(
            title="Password Reset",
            message=response.message(
                "msg", default="If the email exists, a reset link was sent",
            ),
        )

    async def logout(self) -> Route:
        """Clear the session in memory, then in the credential store.

        Storage deletion is best-effort: failures are logged and the
        in-memory session stays cleared. Safe to call when logged out.
        """
        self._generation += 1
        was_authenticated = self._token is not None
        self._user = None
        self._token = None
        self._notify()

        await self._forget_persisted()

        if was_authenticated:
            logger.info("User logged out")
        return Route.LOGIN

    async def update_user(
        self,
        user: Union[User, Mapping[str, Any]],
        *,
        persist: bool = False,
    ) -> User:
        """Replace the in-memory user (after a profile edit). Token untouched.

        The stored copy is only rewritten when ``persist`` is True; otherwise
        it re-syncs on the next login.
        """
        if self._token is None:
            raise NotAuthenticatedError("Log in to update your profile.")
        if not isinstance(user, User):
            user = User.from_dict(user)

        if persist:
            await self._store.set_item(USER_KEY, json.dumps(user.to_dict()))
        self._user = user
        self._notify()
        return user

    # ------------------------------------------------------------------
    # Authenticated calls
    # ------------------------------------------------------------------

    async def authorized_request(self, method: str, path: str, **kwargs: Any) -> ApiResponse:
        """Issue a request carrying the session's bearer token.

        A 401 means the backend no longer accepts the token: the session is
        logged out and SessionExpiredError is raised. Every other status is
        returned for the caller to judge.

        Raises:
            NotAuthenticatedError: There is no token.
            SessionExpiredError:   The backend answered 401.
            TransportError:        The backend could not be reached.
        """
        token = self._token
        if token is None:
            raise NotAuthenticatedError("Log in to continue.")

        response = await self._api.request(method, path, token=token, **kwargs)
        if response.status == 401:
            logger.warning("%s %s returned 401; ending session", method, path)
            if self._token == token:
                await self.logout()
            raise SessionExpiredError(
                response.message(
                    "message", "msg",
                    default="Your session has expired. Please log in again.",
                ),
                status=response.status,
                body=response.body,
            )
        return response

    # ------------------------------------------------------------------
    # Persistence helpers
    # ------------------------------------------------------------------

    async def _persist(self, token: str, raw_user: Mapping[str, Any]) -> None:
        try:
            await self._store.set_item(TOKEN_KEY, token)
            await self._store.set_item(USER_KEY, json.dumps(dict(raw_user)))
        except CredentialStoreError:
            # half-written credentials must not survive to the next bootstrap
            await self._forget_persisted()
            raise

    async def _forget_persisted(self) -> None:
        for key in (TOKEN_KEY, USER_KEY):
            try:
                await self._store.delete_item(key)
            except CredentialStoreError as e:
                logger.warning("Could not delete stored %s: %s", key, e)


def _parse_user(raw: str) -> Optional[User]:
    try:
        return User.from_dict(json.loads(raw))
    except ValueError as e:
        logger.warning("Discarding unreadable stored user record: %s", e)
        return None


def _read_login_payload(response: ApiResponse) -> tuple[str, User, Mapping[str, Any]]:
    if not response.ok:
        raise AuthenticationError(
            response.message("message"),
            status=response.status,
            body=response.body,
        )

    token = response.get("token")
    raw_user = response.get("user")
    if not isinstance(token, str) or not token or not isinstance(raw_user, dict):
        logger.warning("Login answered HTTP %d without token/user", response.status)
        raise AuthenticationError(
            "Unexpected response from server.",
            status=response.status,
            body=response.body,
        )
    return token, User.from_dict(raw_user), raw_user
