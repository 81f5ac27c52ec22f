from typing import Any, Dict, List, Optional, Tuple, Union
from sqlalchemy import func
from sqlalchemy.orm import Session

from portal.core.exceptions import ConflictError, NotFoundError, ValidationError
from portal.core.logging_config import get_logger
from portal.crud.account import account_crud
from portal.crud.base import CRUDBase, transaction
from portal.crud.customer import customer_crud
from portal.crud.permission import permission_crud
from portal.models.role import Role, RoleStatusEnum
from portal.schemas.role import RoleCreate, RoleUpdate

logger = get_logger(__name__)

ADMIN_ROLE_NAME = "Admin"
ADMIN_ROLE_DESCRIPTION = "All permissions, can manage users and roles"
STAFF_ROLE_NAME = "Staff"
STAFF_ROLE_DESCRIPTION = "Basic view permissions for orders and bills"

VIEW_SCOPE_SUFFIX = ":view"
MANAGEMENT_PREFIXES = ("users:", "roles:")


def is_staff_permission(code: str) -> bool:
    return code.endswith(VIEW_SCOPE_SUFFIX) and not code.startswith(MANAGEMENT_PREFIXES)


def merge_patch(current: Dict[str, Any], patch: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay the supplied fields of ``patch`` on ``current``; omitted fields keep their value."""
    merged = dict(current)
    merged.update({k: v for k, v in patch.items() if k in current})
    return merged


class CRUDRole(CRUDBase[Role]):

    def _live(self, db: Session, customer_id: int):
        return db.query(Role).filter(
            Role.customer_id == customer_id,
            Role.status != RoleStatusEnum.DELETED,
        )

    def get_for_customer(
        self, db: Session, id: Any, customer_id: Any, *, for_update: bool = False
    ) -> Optional[Role]:
        query = self._live(db, customer_id).filter(Role.id == id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def get_or_404(self, db: Session, role_id: int, customer_id: int, *, for_update: bool = False) -> Role:
        role = self.get_for_customer(db, role_id, customer_id, for_update=for_update)
        if not role:
            raise NotFoundError("Role not found")
        return role

    def list_for_customer(self, db: Session, customer_id: int) -> List[Tuple[Role, int]]:
        """Non-deleted roles, system roles first, each with its active user count"""
        roles = (
            self._live(db, customer_id)
            .order_by(Role.is_system.desc(), Role.created_at.asc(), Role.id.asc())
            .all()
        )
        counts = account_crud.active_counts_by_role(db, customer_id)
        return [(role, counts.get(role.id, 0)) for role in roles]

    def name_taken(self, db: Session, customer_id: int, name: str, exclude_id: Optional[int] = None) -> bool:
        query = self._live(db, customer_id).filter(Role.name == name)
        if exclude_id is not None:
            query = query.filter(Role.id != exclude_id)
        return db.query(query.exists()).scalar()

    def count_live(self, db: Session, customer_id: int) -> int:
        return (
            db.query(func.count(Role.id))
            .filter(Role.customer_id == customer_id, Role.status != RoleStatusEnum.DELETED)
            .scalar()
        ) or 0

    def _clear_default(self, db: Session, customer_id: int, exclude_id: Optional[int] = None) -> None:
        query = db.query(Role).filter(Role.customer_id == customer_id, Role.is_default.is_(True))
        if exclude_id is not None:
            query = query.filter(Role.id != exclude_id)
        query.update({Role.is_default: False}, synchronize_session="fetch")

    def create(self, db: Session, *, customer_id: int, obj_in: RoleCreate) -> Role:
        name = (obj_in.name or "").strip()
        if not name:
            raise ValidationError("Please enter a role name")

        with transaction(db):
            customer_crud.lock(db, customer_id)

            if self.name_taken(db, customer_id, name):
                raise ConflictError("A role with this name already exists")

            if obj_in.is_default:
                self._clear_default(db, customer_id)

            role = Role(
                customer_id=customer_id,
                name=name,
                description=obj_in.description,
                is_default=bool(obj_in.is_default),
            )
            role.permissions = permission_crud.get_by_ids(db, obj_in.permission_ids)
            db.add(role)

        db.refresh(role)
        logger.info(f"Role {role.id} '{role.name}' created for customer {customer_id}")
        return role

    def update(
        self, db: Session, *, role_id: int, customer_id: int, obj_in: Union[RoleUpdate, Dict[str, Any]]
    ) -> Role:
        patch = obj_in.model_dump(exclude_unset=True) if isinstance(obj_in, RoleUpdate) else dict(obj_in)
        permission_ids = patch.pop("permission_ids", None)
        # An explicit list, even an empty one, replaces every association
        replace_permissions = permission_ids is not None

        # null only clears the description
        patch = {k: v for k, v in patch.items() if v is not None or k == "description"}

        if "name" in patch:
            patch["name"] = patch["name"].strip()
            if not patch["name"]:
                raise ValidationError("Please enter a role name")

        with transaction(db):
            if patch.get("is_default"):
                customer_crud.lock(db, customer_id)

            role = self.get_or_404(db, role_id, customer_id, for_update=True)

            if "name" in patch and patch["name"] != role.name:
                if role.is_system:
                    raise ValidationError("System role names cannot be changed")
                if self.name_taken(db, customer_id, patch["name"], exclude_id=role.id):
                    raise ConflictError("A role with this name already exists")

            merged = merge_patch(
                {
                    "name": role.name,
                    "description": role.description,
                    "is_default": role.is_default,
                },
                patch,
            )

            if merged["is_default"] and not role.is_default:
                self._clear_default(db, customer_id, exclude_id=role.id)

            role.name = merged["name"]
            role.description = merged["description"]
            role.is_default = bool(merged["is_default"])

            if replace_permissions:
                role.permissions = permission_crud.get_by_ids(db, permission_ids)

            db.add(role)

        db.refresh(role)
        logger.info(f"Role {role.id} updated for customer {customer_id}, fields: {sorted(patch)}")
        return role

    def remove(self, db: Session, *, role_id: int, customer_id: int) -> Role:
        """Soft delete. System roles and roles still assigned to active accounts are refused."""
        with transaction(db):
            role = self.get_or_404(db, role_id, customer_id, for_update=True)

            if role.is_system:
                raise ValidationError("System roles cannot be deleted")

            user_count = account_crud.count_active_by_role(db, role.id)
            if user_count > 0:
                raise ConflictError(
                    f"This role is used by {user_count} user(s) and cannot be deleted",
                    data={"userCount": user_count},
                )

            role.status = RoleStatusEnum.DELETED
            role.is_default = False
            role.permissions = []
            db.add(role)

        logger.info(f"Role {role_id} deleted for customer {customer_id}")
        return role

    def init_default_roles(self, db: Session, *, customer_id: int) -> Optional[List[Role]]:
        """
        Create the Admin and Staff system roles for a customer with no roles.

        Returns ``None`` when the customer already has roles.
        """
        with transaction(db):
            customer_crud.lock(db, customer_id)

            if self.count_live(db, customer_id) > 0:
                return None

            all_permissions = permission_crud.get_all(db)

            admin = Role(
                customer_id=customer_id,
                name=ADMIN_ROLE_NAME,
                description=ADMIN_ROLE_DESCRIPTION,
                is_system=True,
                is_default=False,
            )
            admin.permissions = list(all_permissions)

            staff = Role(
                customer_id=customer_id,
                name=STAFF_ROLE_NAME,
                description=STAFF_ROLE_DESCRIPTION,
                is_system=True,
                is_default=True,
            )
            staff.permissions = [p for p in all_permissions if is_staff_permission(p.code)]

            self._clear_default(db, customer_id)
            db.add_all([admin, staff])

        logger.info(f"Default roles initialised for customer {customer_id}")
        return [admin, staff]


role_crud = CRUDRole(Role)
