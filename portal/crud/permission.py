from typing import Dict, Iterable, List
from sqlalchemy.orm import Session

from portal.crud.base import CRUDBase
from portal.models.permission import Permission

# Display names for permission modules
MODULE_NAMES: Dict[str, str] = {
    "dashboard": "Dashboard",
    "orders": "Orders",
    "quote": "Online Quote",
    "tariff": "Tariff Calculator",
    "finance": "Finance",
    "api": "API Management",
    "users": "User Management",
    "roles": "Role Management",
    "settings": "Settings",
}


def get_module_name(module: str) -> str:
    return MODULE_NAMES.get(module, module)


class CRUDPermission(CRUDBase[Permission]):

    def get_all(self, db: Session) -> List[Permission]:
        return (
            db.query(Permission)
            .order_by(Permission.sort_order.asc(), Permission.module.asc(), Permission.id.asc())
            .all()
        )

    def get_by_ids(self, db: Session, ids: Iterable[int]) -> List[Permission]:
        """Catalog entries for ``ids``. Unknown and repeated ids are dropped."""
        unique_ids = set(ids or [])
        if not unique_ids:
            return []
        return (
            db.query(Permission)
            .filter(Permission.id.in_(unique_ids))
            .order_by(Permission.sort_order.asc(), Permission.id.asc())
            .all()
        )

    def group_by_module(self, permissions: List[Permission]) -> List[dict]:
        grouped: Dict[str, dict] = {}
        for perm in permissions:
            if perm.module not in grouped:
                grouped[perm.module] = {
                    "module": perm.module,
                    "module_name": get_module_name(perm.module),
                    "permissions": [],
                }
            grouped[perm.module]["permissions"].append(perm)
        return list(grouped.values())


permission_crud = CRUDPermission(Permission)
