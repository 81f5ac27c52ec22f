from .utils import create_access_token, verify_token, hash_password, verify_password
from .middleware import Identity, JWTAuthMiddleware, authenticate, optional_auth
from .permission_checker import PermissionChecker, require_master_account
