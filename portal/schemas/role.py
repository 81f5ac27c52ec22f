from pydantic import Field
from typing import Optional, List
from datetime import datetime
from portal.models.role import RoleStatusEnum
from portal.schemas.base import CamelModel


class PermissionResponse(CamelModel):
    id: int
    code: str
    name: str
    module: str
    description: Optional[str] = None
    sort_order: int = 0


class PermissionGroup(CamelModel):
    module: str
    module_name: str
    permissions: List[PermissionResponse] = []


class PermissionCatalogResponse(CamelModel):
    list: List[PermissionResponse]
    grouped: List[PermissionGroup]


class RoleCreate(CamelModel):
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=255)
    permission_ids: List[int] = []
    is_default: bool = False


class RoleUpdate(CamelModel):
    """Only fields present in the request body are applied"""
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=255)
    permission_ids: Optional[List[int]] = None
    is_default: Optional[bool] = None


class RoleResponse(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    is_system: bool
    is_default: bool
    status: RoleStatusEnum
    created_at: datetime
    updated_at: datetime
    user_count: Optional[int] = None


class RoleDetailResponse(RoleResponse):
    permissions: List[PermissionResponse] = []
    permission_codes: List[str] = []


class RoleListResponse(CamelModel):
    list: List[RoleResponse]
    total: int
