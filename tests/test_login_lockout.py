"""
Tests for the login / lockout state machine in LoginService.
"""
from datetime import datetime, timedelta

import pytest

from common_utils.auth.utils import verify_token
from portal.config import settings
from portal.core.exceptions import AuthError, ValidationError
from portal.models import AccountStatusEnum
from portal.services.login_service import (
    ACCOUNT_DISABLED, ACCOUNT_LOCKED, INVALID_CREDENTIALS, LoginService,
)
from tests.fixtures import TEST_PASSWORD, create_account, create_role


class FakeClock:
    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 1, 15, 9, 0, 0))


@pytest.fixture
def service(clock):
    return LoginService(now_func=clock)


def fail_times(service, db, login_id, times):
    for _ in range(times):
        with pytest.raises(AuthError):
            service.login(db, login_id, "wrong-password")


class TestLoginSuccess:

    def test_login_returns_token_for_same_account(self, test_db, service, master_account):
        result = service.login(test_db, "master", TEST_PASSWORD, ip_address="10.0.0.8")

        claims = verify_token(result["token"])
        assert claims["accountId"] == master_account.id
        assert claims["customerId"] == master_account.customer_id
        assert claims["userType"] == "master"
        assert result["customer"]["customer_code"] == "CUST001"
        assert result["customer"]["company_name"] == "Test Logistics Ltd"

    def test_login_by_email_is_case_insensitive(self, test_db, service, master_account):
        result = service.login(test_db, "master@example.COM", TEST_PASSWORD)
        assert result["customer"]["id"] == master_account.id

    def test_success_resets_counter_and_stamps_login(self, test_db, service, clock, master_account):
        fail_times(service, test_db, "master", 3)

        service.login(test_db, "master", TEST_PASSWORD, ip_address="10.0.0.8")

        test_db.refresh(master_account)
        assert master_account.login_attempts == 0
        assert master_account.locked_until is None
        assert master_account.last_login_at == clock.current
        assert master_account.last_login_ip == "10.0.0.8"

    def test_sub_account_token_carries_role_permissions(
        self, test_db, service, test_customer, permission_catalog
    ):
        role = create_role(test_db, test_customer, "Ops", codes=("orders:view", "orders:create"),
                           permissions=permission_catalog)
        create_account(test_db, test_customer, "ops", role=role)

        claims = verify_token(service.login(test_db, "ops", TEST_PASSWORD)["token"])

        assert claims["userType"] == "sub"
        assert claims["roleId"] == role.id
        assert claims["roleName"] == "Ops"
        assert sorted(claims["permissions"]) == ["orders:create", "orders:view"]


class TestLoginFailures:

    def test_unknown_account(self, test_db, service):
        with pytest.raises(AuthError) as exc:
            service.login(test_db, "nobody", "whatever")
        assert exc.value.message == INVALID_CREDENTIALS

    def test_missing_credentials(self, test_db, service):
        with pytest.raises(ValidationError):
            service.login(test_db, "", TEST_PASSWORD)
        with pytest.raises(ValidationError):
            service.login(test_db, "master", None)

    def test_wrong_password_increments_counter(self, test_db, service, master_account):
        with pytest.raises(AuthError) as exc:
            service.login(test_db, "master", "wrong-password")

        assert exc.value.message == INVALID_CREDENTIALS
        test_db.refresh(master_account)
        assert master_account.login_attempts == 1
        assert master_account.locked_until is None

    def test_disabled_account(self, test_db, service, test_customer):
        create_account(test_db, test_customer, "frozen", status=AccountStatusEnum.SUSPENDED)

        with pytest.raises(AuthError) as exc:
            service.login(test_db, "frozen", TEST_PASSWORD)
        assert exc.value.message == ACCOUNT_DISABLED


class TestLockout:

    def test_fifth_failure_locks_account(self, test_db, service, clock, master_account):
        fail_times(service, test_db, "master", settings.LOGIN_MAX_ATTEMPTS - 1)
        test_db.refresh(master_account)
        assert master_account.locked_until is None

        with pytest.raises(AuthError) as exc:
            service.login(test_db, "master", "wrong-password")
        assert exc.value.message == INVALID_CREDENTIALS

        test_db.refresh(master_account)
        assert master_account.login_attempts == settings.LOGIN_MAX_ATTEMPTS
        assert master_account.locked_until == clock.current + timedelta(minutes=settings.LOGIN_LOCKOUT_MINUTES)

    def test_locked_account_rejects_correct_password(self, test_db, service, clock, master_account):
        fail_times(service, test_db, "master", settings.LOGIN_MAX_ATTEMPTS)
        clock.advance(minutes=5)

        with pytest.raises(AuthError) as exc:
            service.login(test_db, "master", TEST_PASSWORD)
        assert exc.value.message == ACCOUNT_LOCKED

    def test_locked_attempts_do_not_touch_counter(self, test_db, service, master_account):
        fail_times(service, test_db, "master", settings.LOGIN_MAX_ATTEMPTS)
        test_db.refresh(master_account)
        locked_until = master_account.locked_until

        fail_times(service, test_db, "master", 2)

        test_db.refresh(master_account)
        assert master_account.login_attempts == settings.LOGIN_MAX_ATTEMPTS
        assert master_account.locked_until == locked_until

    def test_lock_lapses_after_window(self, test_db, service, clock, master_account):
        fail_times(service, test_db, "master", settings.LOGIN_MAX_ATTEMPTS)
        clock.advance(minutes=settings.LOGIN_LOCKOUT_MINUTES, seconds=1)

        result = service.login(test_db, "master", TEST_PASSWORD)

        assert verify_token(result["token"])["accountId"] == master_account.id
        test_db.refresh(master_account)
        assert master_account.login_attempts == 0
        assert master_account.locked_until is None

    def test_failure_after_lapse_relocks_immediately(self, test_db, service, clock, master_account):
        # The counter is only reset by a successful login
        fail_times(service, test_db, "master", settings.LOGIN_MAX_ATTEMPTS)
        clock.advance(minutes=settings.LOGIN_LOCKOUT_MINUTES, seconds=1)

        fail_times(service, test_db, "master", 1)

        with pytest.raises(AuthError) as exc:
            service.login(test_db, "master", TEST_PASSWORD)
        assert exc.value.message == ACCOUNT_LOCKED
