# Import all models here for easier access
from portal.models.customer import Customer
from portal.models.account import Account, AccountStatusEnum
from portal.models.permission import Permission
from portal.models.role import Role, RoleStatusEnum, role_permission
from portal.models.api_key import ApiKey, ApiKeyStatusEnum
from portal.models.activity_log import ActivityLog
