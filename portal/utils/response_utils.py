from typing import Any, Dict
from fastapi.encoders import jsonable_encoder
from portal.schemas.base import (
    create_success_response,
    create_error_response,
)


class ResponseWrapper:
    """Utility class for wrapping responses in the portal envelope"""

    @staticmethod
    def success(data: Any = None, message: str = "success") -> Dict[str, Any]:
        return create_success_response(jsonable_encoder(data, by_alias=True), message)

    @staticmethod
    def error(status_code: int, message: str, data: Any = None) -> Dict[str, Any]:
        """Wrap error response and make it JSON-safe"""
        return jsonable_encoder(create_error_response(status_code, message, data))

    @staticmethod
    def created(data: Any = None, message: str = "Created successfully") -> Dict[str, Any]:
        return ResponseWrapper.success(data, message)

    @staticmethod
    def updated(data: Any = None, message: str = "Updated successfully") -> Dict[str, Any]:
        return ResponseWrapper.success(data, message)

    @staticmethod
    def deleted(message: str = "Deleted successfully") -> Dict[str, Any]:
        return ResponseWrapper.success(None, message)
