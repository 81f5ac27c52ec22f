from fastapi import Depends
from typing import List, Union
import logging

from portal.core.exceptions import ForbiddenError

from .middleware import Identity, authenticate

logger = logging.getLogger(__name__)

USERS_MANAGE = "users:manage"


class PermissionChecker:
    """
    Dependency that authenticates the caller and checks permission codes.

    Master accounts pass unconditionally. Sub-accounts need any one of the
    required codes, or all of them with ``require_all=True``.
    """

    def __init__(
        self,
        required_permissions: Union[str, List[str]],
        require_all: bool = False
    ):
        if isinstance(required_permissions, str):
            required_permissions = [required_permissions]
        self.required_permissions = list(required_permissions)
        self.require_all = require_all

    async def __call__(self, identity: Identity = Depends(authenticate)) -> Identity:
        if identity.is_master:
            return identity

        check = all if self.require_all else any
        if not check(code in identity.permissions for code in self.required_permissions):
            logger.warning(
                f"Permission denied for account {identity.account_id}. "
                f"Required: {self.required_permissions}, has: {list(identity.permissions)}"
            )
            raise ForbiddenError()

        return identity


async def require_master_account(identity: Identity = Depends(authenticate)) -> Identity:
    """Master accounts, or sub-accounts holding ``users:manage``"""
    if identity.is_master or USERS_MANAGE in identity.permissions:
        return identity
    raise ForbiddenError("This operation requires administrator privileges")
