from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from common_utils.auth.middleware import Identity, authenticate
from common_utils.auth.permission_checker import PermissionChecker
from portal.core.logging_config import get_logger
from portal.crud.role import role_crud
from portal.database.session import get_db
from portal.models.role import Role
from portal.schemas.role import (
    PermissionResponse, RoleCreate, RoleDetailResponse, RoleListResponse, RoleResponse, RoleUpdate
)
from portal.utils.audit_helper import log_activity
from portal.utils.response_utils import ResponseWrapper

logger = get_logger(__name__)

router = APIRouter(
    prefix="/roles",
    tags=["Roles"]
)

ROLES_MANAGE = "roles:manage"


def role_detail(role: Role) -> RoleDetailResponse:
    detail = RoleDetailResponse.model_validate(role)
    detail.permissions = [PermissionResponse.model_validate(p) for p in role.permissions]
    detail.permission_codes = [p.code for p in role.permissions]
    return detail


@router.get("", status_code=status.HTTP_200_OK)
async def list_roles(
    db: Session = Depends(get_db),
    identity: Identity = Depends(authenticate),
):
    """Roles of the caller's customer with the number of active accounts using each"""
    rows = role_crud.list_for_customer(db, identity.customer_id)
    items = []
    for role, user_count in rows:
        item = RoleResponse.model_validate(role)
        item.user_count = user_count
        items.append(item)

    return ResponseWrapper.success(data=RoleListResponse(list=items, total=len(items)))


@router.post("/init-default", status_code=status.HTTP_200_OK)
async def init_default_roles(
    request: Request,
    db: Session = Depends(get_db),
    identity: Identity = Depends(PermissionChecker(ROLES_MANAGE)),
):
    """Create the Admin and Staff system roles if the customer has no roles yet"""
    roles = role_crud.init_default_roles(db, customer_id=identity.customer_id)
    if roles is None:
        return ResponseWrapper.success(
            data={"initialized": False},
            message="Roles already exist, nothing to initialize",
        )

    log_activity(db, "init_default_roles", identity, resource_type="role",
                 details={"roleIds": [r.id for r in roles]}, request=request)
    return ResponseWrapper.success(
        data={"initialized": True, "roles": [RoleResponse.model_validate(r) for r in roles]},
        message="Default roles initialized",
    )


@router.get("/{role_id}", status_code=status.HTTP_200_OK)
async def get_role(
    role_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(authenticate),
):
    role = role_crud.get_or_404(db, role_id, identity.customer_id)
    return ResponseWrapper.success(data=role_detail(role))


@router.post("", status_code=status.HTTP_200_OK)
async def create_role(
    body: RoleCreate,
    request: Request,
    db: Session = Depends(get_db),
    identity: Identity = Depends(PermissionChecker(ROLES_MANAGE)),
):
    role = role_crud.create(db, customer_id=identity.customer_id, obj_in=body)
    log_activity(db, "create_role", identity, resource_type="role", resource_id=role.id,
                 details={"name": role.name, "permissionIds": body.permission_ids}, request=request)
    return ResponseWrapper.created(data={"id": role.id}, message="Role created successfully")


@router.put("/{role_id}", status_code=status.HTTP_200_OK)
async def update_role(
    role_id: int,
    body: RoleUpdate,
    request: Request,
    db: Session = Depends(get_db),
    identity: Identity = Depends(PermissionChecker(ROLES_MANAGE)),
):
    role = role_crud.update(db, role_id=role_id, customer_id=identity.customer_id, obj_in=body)
    log_activity(db, "update_role", identity, resource_type="role", resource_id=role.id,
                 details=body.model_dump(exclude_unset=True, by_alias=True), request=request)
    return ResponseWrapper.updated(data=role_detail(role), message="Role updated successfully")


@router.delete("/{role_id}", status_code=status.HTTP_200_OK)
async def delete_role(
    role_id: int,
    request: Request,
    db: Session = Depends(get_db),
    identity: Identity = Depends(PermissionChecker(ROLES_MANAGE)),
):
    role = role_crud.remove(db, role_id=role_id, customer_id=identity.customer_id)
    log_activity(db, "delete_role", identity, resource_type="role", resource_id=role_id,
                 details={"name": role.name}, request=request)
    return ResponseWrapper.deleted(message="Role deleted successfully")
