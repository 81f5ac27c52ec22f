from portal.crud.customer import customer_crud
from portal.crud.account import account_crud
from portal.crud.permission import permission_crud
from portal.crud.role import role_crud
from portal.crud.api_key import api_key_crud
from portal.crud.activity_log import activity_log_crud
