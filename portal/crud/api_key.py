import hashlib
import secrets
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union
from sqlalchemy import func
from sqlalchemy.orm import Session

from common_utils import utcnow
from portal.config import settings
from portal.core.exceptions import ConflictError, NotFoundError, ValidationError
from portal.core.logging_config import get_logger
from portal.crud.base import CRUDBase, transaction
from portal.crud.customer import customer_crud
from portal.models.api_key import ApiKey, ApiKeyStatusEnum
from portal.schemas.api_key import ApiKeyCreate, ApiKeyUpdate

logger = get_logger(__name__)

DEFAULT_KEY_PERMISSIONS = ["read"]
PREFIX_LENGTH = 8
UPDATABLE_FIELDS = ("key_name", "permissions", "rate_limit")


def generate_secret() -> str:
    """32 random bytes as 64 hex characters"""
    return secrets.token_hex(32)


def hash_secret(secret: str) -> str:
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def remaining_today(usage_count: int, rate_limit: int) -> int:
    # Approximation over lifetime usage, not a real daily window
    if rate_limit <= 0:
        return 0
    return rate_limit - (usage_count % rate_limit)


class CRUDApiKey(CRUDBase[ApiKey]):

    def get_or_404(self, db: Session, key_id: int, customer_id: int, *, for_update: bool = False) -> ApiKey:
        api_key = self.get_for_customer(db, key_id, customer_id, for_update=for_update)
        if not api_key:
            raise NotFoundError("API key not found")
        return api_key

    def list_for_customer(self, db: Session, customer_id: int) -> List[ApiKey]:
        return (
            db.query(ApiKey)
            .filter(ApiKey.customer_id == customer_id)
            .order_by(ApiKey.created_at.desc(), ApiKey.id.desc())
            .all()
        )

    def count_active(self, db: Session, customer_id: int) -> int:
        return (
            db.query(func.count(ApiKey.id))
            .filter(ApiKey.customer_id == customer_id, ApiKey.status == ApiKeyStatusEnum.ACTIVE)
            .scalar()
        ) or 0

    def create(self, db: Session, *, customer_id: int, obj_in: ApiKeyCreate) -> Tuple[ApiKey, str]:
        """
        Issue a new key for the customer.

        Returns the stored row and the raw secret. The secret is not kept
        anywhere and cannot be recovered afterwards.
        """
        key_name = (obj_in.key_name or "").strip()
        if not key_name:
            raise ValidationError("Please enter a key name")

        with transaction(db):
            customer_crud.lock(db, customer_id)

            if self.count_active(db, customer_id) >= settings.API_KEY_MAX_ACTIVE:
                raise ConflictError(
                    f"You can have at most {settings.API_KEY_MAX_ACTIVE} active API keys"
                )

            secret = generate_secret()
            api_key = ApiKey(
                customer_id=customer_id,
                key_name=key_name,
                key_hash=hash_secret(secret),
                key_prefix=secret[:PREFIX_LENGTH],
                permissions=list(obj_in.permissions) if obj_in.permissions is not None else list(DEFAULT_KEY_PERMISSIONS),
                rate_limit=obj_in.rate_limit or settings.API_KEY_DEFAULT_RATE_LIMIT,
                expires_at=to_naive_utc(obj_in.expires_at),
                status=ApiKeyStatusEnum.ACTIVE,
            )
            db.add(api_key)

        db.refresh(api_key)
        logger.info(f"API key {api_key.id} ({api_key.key_prefix}...) created for customer {customer_id}")
        return api_key, secret

    def update(
        self, db: Session, *, key_id: int, customer_id: int, obj_in: Union[ApiKeyUpdate, Dict[str, Any]]
    ) -> ApiKey:
        patch = obj_in.model_dump(exclude_unset=True) if isinstance(obj_in, ApiKeyUpdate) else dict(obj_in)
        patch = {k: v for k, v in patch.items() if k in UPDATABLE_FIELDS and v is not None}

        if "key_name" in patch:
            patch["key_name"] = patch["key_name"].strip()
            if not patch["key_name"]:
                raise ValidationError("Please enter a key name")

        with transaction(db):
            api_key = self.get_or_404(db, key_id, customer_id, for_update=True)

            if not patch:
                raise ValidationError("Nothing to update")

            for field, value in patch.items():
                setattr(api_key, field, value)
            db.add(api_key)

        db.refresh(api_key)
        logger.info(f"API key {key_id} updated for customer {customer_id}, fields: {sorted(patch)}")
        return api_key

    def revoke(self, db: Session, *, key_id: int, customer_id: int) -> ApiKey:
        with transaction(db):
            api_key = self.get_or_404(db, key_id, customer_id, for_update=True)
            if api_key.status != ApiKeyStatusEnum.REVOKED:
                api_key.status = ApiKeyStatusEnum.REVOKED
                api_key.revoked_at = utcnow()
                db.add(api_key)

        logger.info(f"API key {key_id} revoked for customer {customer_id}")
        return api_key

    def stats(self, db: Session, *, key_id: int, customer_id: int) -> Dict[str, Any]:
        api_key = self.get_or_404(db, key_id, customer_id)
        usage_count = api_key.usage_count or 0
        return {
            "key_name": api_key.key_name,
            "usage_count": usage_count,
            "last_used_at": api_key.last_used_at,
            "rate_limit": api_key.rate_limit,
            "remaining_today": remaining_today(usage_count, api_key.rate_limit),
        }


api_key_crud = CRUDApiKey(ApiKey)
