"""Identity provider: email/password accounts, anonymous sessions, role claims."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from threading import Lock
from typing import Callable, Iterable
from uuid import uuid4

import bcrypt

from ges_annex.constants.quiz_constants import DEFAULT_AUTHOR_ROLE
from ges_annex.core.errors import PermissionDenied, Unauthenticated, ValidationError
from ges_annex.core.models import Subject
from ges_annex.core.services.subscription import Subscription

logger = logging.getLogger(__name__)

SubjectListener = Callable[[Subject | None], None]

_MIN_PASSWORD_LENGTH = 6
_MAX_PASSWORD_BYTES = 72


@dataclass(slots=True)
class _Account:
    subject_id: str
    email: str
    password_hash: str
    roles: set[str] = field(default_factory=set)


class AccountDirectory:
    """Registered accounts shared by every client session."""

    def __init__(
        self,
        bcrypt_rounds: int = 12,
        author_emails: Iterable[str] = (),
        author_role: str = DEFAULT_AUTHOR_ROLE,
    ) -> None:
        self._lock = Lock()
        self._accounts: dict[str, _Account] = {}
        self._by_id: dict[str, _Account] = {}
        self._bcrypt_rounds = bcrypt_rounds
        self._author_emails = {email.strip().lower() for email in author_emails}
        self._author_role = author_role

    def register(self, email: str, password: str) -> Subject:
        normalized = _normalize_email(email)
        _check_password(password)
        password_hash = bcrypt.hashpw(
            password.encode("utf-8"), bcrypt.gensalt(rounds=self._bcrypt_rounds)
        ).decode("utf-8")
        with self._lock:
            if normalized in self._accounts:
                raise ValidationError("An account with this email already exists.", field="email")
            account = _Account(subject_id=uuid4().hex, email=normalized, password_hash=password_hash)
            if normalized in self._author_emails:
                account.roles.add(self._author_role)
            self._accounts[normalized] = account
            self._by_id[account.subject_id] = account
            subject = _to_subject(account)
        logger.info("Registered account %s", normalized)
        return subject

    def authenticate(self, email: str, password: str) -> Subject | None:
        with self._lock:
            account = self._accounts.get(email.strip().lower())
            if account is None:
                return None
            password_hash = account.password_hash
        try:
            matches = bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            matches = False
        if not matches:
            return None
        return self.subject_for(account.subject_id)

    def subject_for(self, subject_id: str) -> Subject | None:
        with self._lock:
            account = self._by_id.get(subject_id)
            return _to_subject(account) if account else None

    def grant_role(self, subject_id: str, role: str) -> None:
        with self._lock:
            account = self._by_id.get(subject_id)
            if account is None:
                raise KeyError(f"Unknown subject {subject_id}")
            account.roles.add(role)
        logger.info("Granted role %s to %s", role, subject_id)

    def revoke_role(self, subject_id: str, role: str) -> None:
        with self._lock:
            account = self._by_id.get(subject_id)
            if account is None:
                raise KeyError(f"Unknown subject {subject_id}")
            account.roles.discard(role)


class IdentityProvider:
    """Authentication state of one client, backed by a shared directory.

    With ``anonymous_fallback`` enabled the provider signs in anonymously
    whenever it would otherwise have no subject, as the hosted site does.
    """

    def __init__(self, directory: AccountDirectory, anonymous_fallback: bool = False) -> None:
        self._directory = directory
        self._anonymous_fallback = anonymous_fallback
        self._lock = Lock()
        self._subject: Subject | None = None
        self._listeners: dict[int, SubjectListener] = {}
        self._listener_counter = 0
        if anonymous_fallback:
            self.sign_in_anonymously()

    def current_subject(self) -> Subject | None:
        with self._lock:
            subject = self._subject
        if subject is None or subject.is_anonymous:
            return subject
        # Re-read so role grants take effect without signing in again.
        return self._directory.subject_for(subject.id) or subject

    def subscribe(self, listener: SubjectListener) -> Subscription:
        with self._lock:
            self._listener_counter += 1
            token = self._listener_counter
            self._listeners[token] = listener
        listener(self.current_subject())
        return Subscription(lambda: self._drop_listener(token))

    def sign_up(self, email: str, password: str) -> Subject:
        subject = self._directory.register(email, password)
        self._set_subject(subject)
        return subject

    def sign_in(self, email: str, password: str) -> Subject:
        subject = self._directory.authenticate(email, password)
        if subject is None:
            raise Unauthenticated("Invalid email or password.")
        self._set_subject(subject)
        logger.info("Signed in %s", subject.email)
        return subject

    def sign_in_anonymously(self) -> Subject:
        subject = Subject(id=uuid4().hex, is_anonymous=True)
        self._set_subject(subject)
        return subject

    def sign_out(self) -> None:
        self._set_subject(None)
        if self._anonymous_fallback:
            self.sign_in_anonymously()

    def _set_subject(self, subject: Subject | None) -> None:
        with self._lock:
            self._subject = subject
            listeners = list(self._listeners.values())
        for listener in listeners:
            listener(subject)

    def _drop_listener(self, token: int) -> None:
        with self._lock:
            self._listeners.pop(token, None)


def _normalize_email(email: str) -> str:
    normalized = email.strip().lower()
    local, _, domain = normalized.partition("@")
    if not local or "." not in domain:
        raise ValidationError("Enter a valid email address.", field="email")
    return normalized


def _check_password(password: str) -> None:
    if len(password) < _MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {_MIN_PASSWORD_LENGTH} characters.", field="password"
        )
    if len(password.encode("utf-8")) > _MAX_PASSWORD_BYTES:
        raise ValidationError(
            f"Password must be at most {_MAX_PASSWORD_BYTES} bytes.", field="password"
        )


def _to_subject(account: _Account) -> Subject:
    return Subject(
        id=account.subject_id,
        email=account.email,
        roles=frozenset(account.roles),
    )


def require_role(identity: IdentityProvider, role: str, action: str) -> Subject:
    """Return the signed-in subject holding ``role`` or raise for ``action``."""
    subject = identity.current_subject()
    if subject is None or subject.is_anonymous:
        raise Unauthenticated(f"Please sign in to {action}.")
    if not subject.has_role(role):
        raise PermissionDenied(f"Your account is not allowed to {action}.")
    return subject
