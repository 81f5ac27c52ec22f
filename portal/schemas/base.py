from typing import Any, Dict
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Schemas exchanged with the portal UI use camelCase field names"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# Utility functions for creating consistent responses
def create_success_response(data: Any = None, message: str = "success") -> Dict[str, Any]:
    return {
        "errCode": 200,
        "msg": message,
        "data": data,
    }

def create_error_response(status_code: int, message: str, data: Any = None) -> Dict[str, Any]:
    return {
        "errCode": status_code,
        "msg": message,
        "data": data,
    }
