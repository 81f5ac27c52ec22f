from portal.routes.auth_router import router as auth_router
from portal.routes.permission_router import router as permission_router
from portal.routes.role_router import router as role_router
from portal.routes.api_key_router import router as api_key_router
