from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from common_utils.auth.middleware import Identity, authenticate
from common_utils.auth.permission_checker import PermissionChecker
from portal.crud.api_key import api_key_crud
from portal.database.session import get_db
from portal.schemas.api_key import ApiKeyCreate, ApiKeyCreatedResponse, ApiKeyResponse, ApiKeyStats, ApiKeyUpdate
from portal.utils.audit_helper import log_activity
from portal.utils.response_utils import ResponseWrapper

router = APIRouter(
    prefix="/api-keys",
    tags=["API Keys"]
)

API_MANAGE = "api:manage"


@router.get("", status_code=status.HTTP_200_OK)
async def list_api_keys(
    db: Session = Depends(get_db),
    identity: Identity = Depends(authenticate),
):
    keys = api_key_crud.list_for_customer(db, identity.customer_id)
    return ResponseWrapper.success(data=[ApiKeyResponse.model_validate(k) for k in keys])


@router.post("", status_code=status.HTTP_200_OK)
async def create_api_key(
    body: ApiKeyCreate,
    request: Request,
    db: Session = Depends(get_db),
    identity: Identity = Depends(PermissionChecker(API_MANAGE)),
):
    """
    Issue a new API key.

    The full key appears only in this response; store it now.
    """
    api_key, secret = api_key_crud.create(db, customer_id=identity.customer_id, obj_in=body)
    log_activity(db, "create_api_key", identity, resource_type="api_key", resource_id=api_key.id,
                 details={"keyName": api_key.key_name, "keyPrefix": api_key.key_prefix}, request=request)

    return ResponseWrapper.created(
        data=ApiKeyCreatedResponse(
            id=api_key.id,
            key_name=api_key.key_name,
            api_key=secret,
            key_prefix=api_key.key_prefix,
            permissions=api_key.permissions,
            rate_limit=api_key.rate_limit,
            expires_at=api_key.expires_at,
        ),
        message="API key created, please keep it safe",
    )


@router.put("/{key_id}", status_code=status.HTTP_200_OK)
async def update_api_key(
    key_id: int,
    body: ApiKeyUpdate,
    request: Request,
    db: Session = Depends(get_db),
    identity: Identity = Depends(PermissionChecker(API_MANAGE)),
):
    api_key = api_key_crud.update(db, key_id=key_id, customer_id=identity.customer_id, obj_in=body)
    log_activity(db, "update_api_key", identity, resource_type="api_key", resource_id=key_id,
                 details=body.model_dump(exclude_unset=True, by_alias=True), request=request)
    return ResponseWrapper.updated(data=ApiKeyResponse.model_validate(api_key), message="API key updated successfully")


@router.delete("/{key_id}", status_code=status.HTTP_200_OK)
async def revoke_api_key(
    key_id: int,
    request: Request,
    db: Session = Depends(get_db),
    identity: Identity = Depends(PermissionChecker(API_MANAGE)),
):
    api_key = api_key_crud.revoke(db, key_id=key_id, customer_id=identity.customer_id)
    log_activity(db, "revoke_api_key", identity, resource_type="api_key", resource_id=key_id,
                 details={"keyName": api_key.key_name}, request=request)
    return ResponseWrapper.success(message="API key revoked")


@router.get("/{key_id}/stats", status_code=status.HTTP_200_OK)
async def get_api_key_stats(
    key_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(authenticate),
):
    stats = api_key_crud.stats(db, key_id=key_id, customer_id=identity.customer_id)
    return ResponseWrapper.success(data=ApiKeyStats(**stats))
