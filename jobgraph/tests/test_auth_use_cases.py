from __future__ import annotations

from datetime import timedelta

import pytest

from jobgraph.application.services.token_service import TokenService
from jobgraph.application.use_cases.users.change_email import ChangeEmailUseCase
from jobgraph.application.use_cases.users.change_password import ChangePasswordUseCase
from jobgraph.application.use_cases.users.delete_account import DeleteAccountUseCase
from jobgraph.application.use_cases.users.get_current_user import GetCurrentUserUseCase
from jobgraph.application.use_cases.users.login_user import LoginUserUseCase
from jobgraph.application.use_cases.users.logout_user import LogoutUserUseCase
from jobgraph.application.use_cases.users.register_user import RegisterUserUseCase
from jobgraph.application.use_cases.users.verify_email import VerifyEmailUseCase
from jobgraph.domain.users.entities import ClientContext, Role
from jobgraph.domain.users.exceptions import (
    AccountLockedError,
    EmailInUseError,
    InvalidCredentialsError,
    InvalidPasswordError,
    RevokedTokenError,
    SameEmailError,
    UserAlreadyExistsError,
    UserNotFoundError,
    VerificationTokenExpiredError,
    VerificationTokenInvalidError,
)
from jobgraph.infrastructure.auth.login_attempts import LoginAttemptsTracker


@pytest.fixture()
def register(users, token_service: TokenService, hasher, clock) -> RegisterUserUseCase:
    return RegisterUserUseCase(
        users=users, tokens=token_service, password_hasher=hasher, clock=clock
    )


@pytest.fixture()
def login(users, token_service: TokenService, hasher, clock) -> LoginUserUseCase:
    tracker = LoginAttemptsTracker(
        max_attempts=3, lockout_seconds=60, clock=lambda: clock().timestamp()
    )
    return LoginUserUseCase(
        users=users, tokens=token_service, password_hasher=hasher, attempts=tracker
    )


def _register(use_case: RegisterUserUseCase, email: str = "Alice@Example.com", role: Role = Role.CANDIDATE):
    return use_case.execute(
        email=email,
        password="Secret1!",
        first_name="Alice",
        last_name="Smith",
        role=role,
    )


def test_register_user_success(register: RegisterUserUseCase, token_service: TokenService, clock) -> None:
    user, tokens = _register(register, role=Role.EMPLOYER)

    assert user.id == 1
    assert user.email == "alice@example.com"
    assert user.password_hash == "hashed:Secret1!"
    assert user.email_verified is False
    assert user.email_verification_token
    assert user.email_verification_expires_at == clock() + timedelta(hours=24)
    assert token_service.verify_access_token(tokens.access_token).role is Role.EMPLOYER


def test_register_user_duplicate_email_is_case_insensitive(register: RegisterUserUseCase) -> None:
    _register(register)
    with pytest.raises(UserAlreadyExistsError):
        _register(register, email="ALICE@example.com")


def test_login_user_success(register, login: LoginUserUseCase, token_service: TokenService) -> None:
    registered, _ = _register(register)

    user, tokens = login.execute("alice@example.com", "Secret1!", ClientContext("ua", "1.2.3.4"))

    assert user.id == registered.id
    assert token_service.verify_access_token(tokens.access_token).user_id == registered.id


def test_login_user_invalid_credentials(register, login: LoginUserUseCase) -> None:
    _register(register)
    with pytest.raises(InvalidCredentialsError):
        login.execute("alice@example.com", "wrong")
    with pytest.raises(InvalidCredentialsError):
        login.execute("nobody@example.com", "Secret1!")


def test_login_locks_account_after_repeated_failures(register, login: LoginUserUseCase, clock) -> None:
    _register(register)
    for _ in range(2):
        with pytest.raises(InvalidCredentialsError):
            login.execute("alice@example.com", "wrong")
    with pytest.raises(AccountLockedError):
        login.execute("alice@example.com", "wrong")
    with pytest.raises(AccountLockedError):
        login.execute("alice@example.com", "Secret1!")

    clock.advance(seconds=61)
    user, _ = login.execute("alice@example.com", "Secret1!")
    assert user.email == "alice@example.com"


def test_logout_revokes_refresh_token(register, token_service: TokenService) -> None:
    _, tokens = _register(register)

    LogoutUserUseCase(tokens=token_service).execute(tokens.refresh_token)
    LogoutUserUseCase(tokens=token_service).execute(None)

    with pytest.raises(RevokedTokenError):
        token_service.refresh(tokens.refresh_token)


def test_verify_email(register, users, clock) -> None:
    user, _ = _register(register)
    use_case = VerifyEmailUseCase(users=users, clock=clock)

    verified = use_case.execute(user.email_verification_token)

    assert verified.id == user.id
    assert users.find_by_id(user.id).email_verified is True
    with pytest.raises(VerificationTokenInvalidError):
        use_case.execute(user.email_verification_token)


def test_verify_email_expired_token(register, users, clock) -> None:
    user, _ = _register(register)
    clock.advance(hours=25)
    with pytest.raises(VerificationTokenExpiredError):
        VerifyEmailUseCase(users=users, clock=clock).execute(user.email_verification_token)


def test_change_password_revokes_every_session(
    register, users, hasher, token_service: TokenService, login
) -> None:
    user, first = _register(register)
    _, second = login.execute("alice@example.com", "Secret1!")
    use_case = ChangePasswordUseCase(users=users, tokens=token_service, password_hasher=hasher)

    with pytest.raises(InvalidPasswordError):
        use_case.execute(user.id, "wrong", "NewSecret1!")
    assert use_case.execute(user.id, "Secret1!", "NewSecret1!") == 2

    for pair in (first, second):
        with pytest.raises(RevokedTokenError):
            token_service.refresh(pair.refresh_token)
    assert users.find_by_id(user.id).password_hash == "hashed:NewSecret1!"


def test_get_current_user(register, users) -> None:
    user, _ = _register(register)
    use_case = GetCurrentUserUseCase(users=users)
    assert use_case.execute(user.id).email == "alice@example.com"
    with pytest.raises(UserNotFoundError):
        use_case.execute(999)


def test_change_email_resets_verification(register, users, hasher, clock) -> None:
    user, _ = _register(register)
    users.mark_email_verified(user.id)
    use_case = ChangeEmailUseCase(users=users, password_hasher=hasher, clock=clock)

    updated = use_case.execute(user.id, " New@Example.com ", "Secret1!")

    assert updated.email == "new@example.com"
    assert updated.email_verified is False
    assert updated.email_verification_token not in (None, user.email_verification_token)
    assert updated.email_verification_expires_at == clock() + timedelta(hours=24)
    assert users.find_by_email("alice@example.com") is None


def test_change_email_rejections(register, users, hasher, clock) -> None:
    user, _ = _register(register)
    _register(register, email="bob@example.com")
    use_case = ChangeEmailUseCase(users=users, password_hasher=hasher, clock=clock)

    with pytest.raises(SameEmailError):
        use_case.execute(user.id, "ALICE@example.com", "Secret1!")
    with pytest.raises(InvalidPasswordError):
        use_case.execute(user.id, "carol@example.com", "wrong")
    with pytest.raises(EmailInUseError):
        use_case.execute(user.id, "bob@example.com", "Secret1!")
    with pytest.raises(UserNotFoundError):
        use_case.execute(999, "carol@example.com", "Secret1!")
    assert users.find_by_id(user.id).email == "alice@example.com"


def test_delete_account_deactivates_and_revokes(
    register, users, hasher, token_service: TokenService, login
) -> None:
    user, first = _register(register)
    login.execute("alice@example.com", "Secret1!")
    use_case = DeleteAccountUseCase(users=users, tokens=token_service, password_hasher=hasher)

    with pytest.raises(InvalidPasswordError):
        use_case.execute(user.id, "wrong")
    assert users.find_by_id(user.id).is_active is True

    assert use_case.execute(user.id, "Secret1!") == 2
    assert users.find_by_id(user.id).is_active is False
    with pytest.raises(RevokedTokenError):
        token_service.refresh(first.refresh_token)
    with pytest.raises(InvalidCredentialsError):
        login.execute("alice@example.com", "Secret1!")
    with pytest.raises(UserNotFoundError):
        use_case.execute(user.id, "Secret1!")
