from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from common_utils.auth.middleware import Identity, authenticate
from portal.crud.permission import permission_crud
from portal.database.session import get_db
from portal.schemas.role import PermissionCatalogResponse, PermissionGroup, PermissionResponse
from portal.utils.response_utils import ResponseWrapper

router = APIRouter(
    prefix="/permissions",
    tags=["Permissions"]
)


@router.get("", status_code=status.HTTP_200_OK)
async def get_permissions(
    db: Session = Depends(get_db),
    identity: Identity = Depends(authenticate),
):
    """Full permission catalog, flat and grouped by module"""
    permissions = permission_crud.get_all(db)
    grouped = permission_crud.group_by_module(permissions)

    return ResponseWrapper.success(
        data=PermissionCatalogResponse(
            list=[PermissionResponse.model_validate(p) for p in permissions],
            grouped=[
                PermissionGroup(
                    module=g["module"],
                    module_name=g["module_name"],
                    permissions=[PermissionResponse.model_validate(p) for p in g["permissions"]],
                )
                for g in grouped
            ],
        )
    )
