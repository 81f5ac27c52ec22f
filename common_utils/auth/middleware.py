from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from fastapi import Request

from portal.core.exceptions import AuthError
from .utils import verify_token

USER_TYPE_MASTER = "master"
USER_TYPE_SUB = "sub"


@dataclass(frozen=True)
class Identity:
    """Caller identity resolved from a verified token. Valid for one request only."""
    account_id: int
    customer_id: int
    username: Optional[str] = None
    email: Optional[str] = None
    customer_code: Optional[str] = None
    company_name: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    user_type: str = USER_TYPE_MASTER
    role_id: Optional[int] = None
    role_name: Optional[str] = None
    permissions: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_master(self) -> bool:
        return self.user_type == USER_TYPE_MASTER

    def has_permission(self, code: str) -> bool:
        return self.is_master or code in self.permissions

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> "Identity":
        return cls(
            account_id=claims.get("accountId"),
            customer_id=claims.get("customerId"),
            username=claims.get("username"),
            email=claims.get("email"),
            customer_code=claims.get("customerCode") or (
                str(claims["customerId"]) if claims.get("customerId") is not None else None
            ),
            company_name=claims.get("companyName"),
            contact_person=claims.get("contactPerson") or claims.get("username"),
            phone=claims.get("phone"),
            user_type=claims.get("userType") or USER_TYPE_MASTER,
            role_id=claims.get("roleId"),
            role_name=claims.get("roleName"),
            permissions=tuple(claims.get("permissions") or ()),
        )

    def to_claims(self) -> Dict[str, Any]:
        return {
            "accountId": self.account_id,
            "customerId": self.customer_id,
            "customerCode": self.customer_code,
            "username": self.username,
            "email": self.email,
            "companyName": self.company_name,
            "contactPerson": self.contact_person,
            "phone": self.phone,
            "userType": self.user_type,
            "roleId": self.role_id,
            "roleName": self.role_name,
            "permissions": list(self.permissions) if not self.is_master else None,
        }


def extract_token(authorization: Optional[str]) -> Optional[str]:
    """Accept both ``Bearer <token>`` and a bare token"""
    if not authorization:
        return None
    authorization = authorization.strip()
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer":
        return credentials.strip() or None
    return authorization or None


def resolve_identity(request: Request) -> Optional[Identity]:
    token = extract_token(request.headers.get("Authorization"))
    if token is None:
        return None
    claims = verify_token(token)
    if not claims or claims.get("accountId") is None or claims.get("customerId") is None:
        return None
    return Identity.from_claims(claims)


class JWTAuthMiddleware:
    """
    Dependency resolving the caller's identity from the ``Authorization`` header.

    The token is the only source of identity for the request; no database
    lookup is made here. With ``auto_error=False`` a missing or bad token
    yields ``None`` instead of a 401.
    """

    def __init__(self, auto_error: bool = True):
        self.auto_error = auto_error

    async def __call__(self, request: Request) -> Optional[Identity]:
        if not request.headers.get("Authorization"):
            if self.auto_error:
                raise AuthError("Please log in first")
            return None

        identity = resolve_identity(request)
        if identity is None:
            if self.auto_error:
                raise AuthError("Token is invalid or expired")
            return None

        request.state.identity = identity
        return identity


authenticate = JWTAuthMiddleware()
optional_auth = JWTAuthMiddleware(auto_error=False)
