from portal.schemas.base import CamelModel, create_success_response, create_error_response
from portal.schemas.auth import LoginRequest, ChangePasswordRequest, CustomerProfile, LoginResponse, TokenResponse
from portal.schemas.role import (
    PermissionResponse, PermissionGroup, PermissionCatalogResponse,
    RoleCreate, RoleUpdate, RoleResponse, RoleDetailResponse, RoleListResponse,
)
from portal.schemas.api_key import (
    ApiKeyCreate, ApiKeyUpdate, ApiKeyResponse, ApiKeyCreatedResponse, ApiKeyStats,
)
