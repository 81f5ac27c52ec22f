"""
Tests for identity resolution and the permission dependencies.
"""
import asyncio
from datetime import timedelta

import pytest
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

from common_utils.auth.middleware import Identity, extract_token, optional_auth, authenticate
from common_utils.auth.permission_checker import PermissionChecker, require_master_account
from common_utils.auth.utils import create_access_token
from portal.core.exceptions import ForbiddenError, PortalError
from portal.utils.response_utils import ResponseWrapper


MASTER = Identity(account_id=1, customer_id=10, username="boss", customer_code="C10")
SUB = Identity(
    account_id=2, customer_id=10, username="clerk", customer_code="C10", contact_person="Carol",
    user_type="sub",
    role_id=5, role_name="Clerk", permissions=("orders:view", "roles:view"),
)


def bearer(identity: Identity, **kwargs) -> dict:
    return {"Authorization": f"Bearer {create_access_token(identity.to_claims(), **kwargs)}"}


@pytest.fixture
def guarded_client():
    """A small app exposing the dependencies under test"""
    guarded = FastAPI()

    @guarded.exception_handler(PortalError)
    async def handle(request, exc: PortalError):
        return JSONResponse(status_code=exc.status_code,
                            content=ResponseWrapper.error(exc.status_code, exc.message, exc.data))

    @guarded.get("/required")
    async def required(identity: Identity = Depends(authenticate)):
        return {"accountId": identity.account_id, "userType": identity.user_type,
                "permissions": list(identity.permissions)}

    @guarded.get("/optional")
    async def optional(identity=Depends(optional_auth)):
        return {"accountId": identity.account_id if identity else None}

    @guarded.get("/orders")
    async def orders(identity: Identity = Depends(PermissionChecker("orders:view"))):
        return {"ok": True}

    @guarded.get("/both")
    async def both(identity: Identity = Depends(PermissionChecker(["orders:view", "api:manage"], require_all=True))):
        return {"ok": True}

    @guarded.get("/admin")
    async def admin(identity: Identity = Depends(require_master_account)):
        return {"ok": True}

    return TestClient(guarded)


class TestExtractToken:

    @pytest.mark.parametrize("header,expected", [
        ("Bearer abc.def.ghi", "abc.def.ghi"),
        ("bearer abc.def.ghi", "abc.def.ghi"),
        ("abc.def.ghi", "abc.def.ghi"),
        ("  Bearer   abc  ", "abc"),
        ("", None),
        (None, None),
        ("Bearer ", None),
    ])
    def test_extract(self, header, expected):
        assert extract_token(header) == expected


class TestIdentityClaims:

    def test_claims_round_trip(self):
        assert Identity.from_claims(SUB.to_claims()) == SUB

    def test_master_claims_carry_no_permission_list(self):
        assert MASTER.to_claims()["permissions"] is None
        assert MASTER.has_permission("anything:at:all")

    def test_missing_fields_fall_back(self):
        identity = Identity.from_claims({"accountId": 3, "customerId": 9, "username": "x"})
        assert identity.customer_code == "9"
        assert identity.contact_person == "x"
        assert identity.is_master


class TestAuthenticate:

    def test_bearer_token(self, guarded_client):
        response = guarded_client.get("/required", headers=bearer(SUB))
        assert response.status_code == 200
        assert response.json() == {"accountId": 2, "userType": "sub",
                                   "permissions": ["orders:view", "roles:view"]}

    def test_raw_token_without_scheme(self, guarded_client):
        token = create_access_token(MASTER.to_claims())
        response = guarded_client.get("/required", headers={"Authorization": token})
        assert response.status_code == 200

    def test_missing_header(self, guarded_client):
        response = guarded_client.get("/required")
        assert response.status_code == 401
        assert response.json()["msg"] == "Please log in first"

    def test_expired_token(self, guarded_client):
        response = guarded_client.get("/required", headers=bearer(MASTER, expires_delta=timedelta(seconds=-1)))
        assert response.status_code == 401
        assert response.json()["msg"] == "Token is invalid or expired"

    def test_token_without_account_claims(self, guarded_client):
        token = create_access_token({"username": "ghost"})
        response = guarded_client.get("/required", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_optional_auth(self, guarded_client):
        assert guarded_client.get("/optional").json() == {"accountId": None}
        assert guarded_client.get("/optional", headers={"Authorization": "Bearer junk"}).json() == {"accountId": None}
        assert guarded_client.get("/optional", headers=bearer(MASTER)).json() == {"accountId": 1}


class TestPermissionChecker:

    def test_master_always_passes(self, guarded_client):
        assert guarded_client.get("/both", headers=bearer(MASTER)).status_code == 200

    def test_sub_with_permission(self, guarded_client):
        assert guarded_client.get("/orders", headers=bearer(SUB)).status_code == 200

    def test_sub_missing_one_of_all(self, guarded_client):
        response = guarded_client.get("/both", headers=bearer(SUB))
        assert response.status_code == 403
        assert response.json()["errCode"] == 403

    def test_require_master_account(self, guarded_client):
        assert guarded_client.get("/admin", headers=bearer(MASTER)).status_code == 200
        assert guarded_client.get("/admin", headers=bearer(SUB)).status_code == 403

        user_admin = Identity(account_id=4, customer_id=10, user_type="sub", permissions=("users:manage",))
        assert guarded_client.get("/admin", headers=bearer(user_admin)).status_code == 200

    def test_checker_called_directly(self):
        checker = PermissionChecker("roles:manage")
        with pytest.raises(ForbiddenError):
            asyncio.run(checker(identity=SUB))
        assert asyncio.run(checker(identity=MASTER)) is MASTER
