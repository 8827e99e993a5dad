"""Tests for accounts, sessions and role checks."""

from __future__ import annotations

import pytest

from ges_annex.core.errors import PermissionDenied, Unauthenticated, ValidationError
from ges_annex.core.services.identity_provider import IdentityProvider, require_role

from conftest import AUTHOR_EMAIL, PASSWORD, STUDENT_EMAIL


def test_sign_up_signs_in_and_normalizes_email(directory):
    identity = IdentityProvider(directory)

    subject = identity.sign_up("  Ama@School.edu.gh ", PASSWORD)

    assert subject.email == "ama@school.edu.gh"
    assert identity.current_subject() == subject
    assert not subject.is_anonymous


def test_duplicate_email_is_rejected(directory):
    IdentityProvider(directory).sign_up(STUDENT_EMAIL, PASSWORD)

    with pytest.raises(ValidationError) as excinfo:
        IdentityProvider(directory).sign_up(STUDENT_EMAIL.upper(), PASSWORD)

    assert excinfo.value.field == "email"


@pytest.mark.parametrize(
    ("email", "password", "field"),
    [
        ("not-an-email", PASSWORD, "email"),
        ("ama@school.edu.gh", "123", "password"),
        ("ama@school.edu.gh", "x" * 73, "password"),
    ],
)
def test_invalid_sign_up_reports_field(directory, email, password, field):
    with pytest.raises(ValidationError) as excinfo:
        IdentityProvider(directory).sign_up(email, password)

    assert excinfo.value.field == field


def test_passwords_are_hashed(directory):
    directory.register(STUDENT_EMAIL, PASSWORD)

    account = directory._accounts[STUDENT_EMAIL]
    assert account.password_hash != PASSWORD
    assert account.password_hash.startswith("$2")


def test_sign_in_with_correct_and_wrong_password(directory):
    directory.register(STUDENT_EMAIL, PASSWORD)
    identity = IdentityProvider(directory)

    with pytest.raises(Unauthenticated):
        identity.sign_in(STUDENT_EMAIL, "wrong-password")
    assert identity.current_subject() is None

    subject = identity.sign_in(STUDENT_EMAIL, PASSWORD)
    assert subject.email == STUDENT_EMAIL


def test_author_emails_get_author_role(author_identity, student_identity):
    assert author_identity.current_subject().has_role("author")
    assert not student_identity.current_subject().has_role("author")


def test_sign_out_clears_subject(student_identity):
    student_identity.sign_out()

    assert student_identity.current_subject() is None


def test_anonymous_fallback_signs_in_anonymously_again(directory):
    identity = IdentityProvider(directory, anonymous_fallback=True)
    first = identity.current_subject()
    assert first.is_anonymous
    assert first.email is None

    identity.sign_up(STUDENT_EMAIL, PASSWORD)
    identity.sign_out()

    replacement = identity.current_subject()
    assert replacement.is_anonymous
    assert replacement.id != first.id


def test_subscribe_delivers_current_then_changes(directory):
    identity = IdentityProvider(directory)
    seen = []
    subscription = identity.subscribe(lambda subject: seen.append(subject.email if subject else None))

    identity.sign_up(STUDENT_EMAIL, PASSWORD)
    identity.sign_out()
    subscription.unsubscribe()
    identity.sign_in(STUDENT_EMAIL, PASSWORD)

    assert seen == [None, STUDENT_EMAIL, None]


def test_require_role(directory, author_identity, student_identity):
    assert require_role(author_identity, "author", "author quizzes").email == AUTHOR_EMAIL
    with pytest.raises(PermissionDenied):
        require_role(student_identity, "author", "author quizzes")
    with pytest.raises(Unauthenticated):
        require_role(IdentityProvider(directory, anonymous_fallback=True), "author", "author quizzes")


def test_revoke_role_applies_to_live_session(directory, author_identity):
    directory.revoke_role(author_identity.current_subject().id, "author")

    assert not author_identity.current_subject().has_role("author")


def test_grant_role_for_unknown_subject_raises(directory):
    with pytest.raises(KeyError):
        directory.grant_role("missing", "author")
