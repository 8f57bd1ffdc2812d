"""Request and response shapes carried over the method channel."""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

INVALID_ARGUMENT = "InvalidArgument"
PROCESSING_ERROR = "ProcessingError"
RECOGNITION_ERROR = "RecognitionError"
# transport-level codes
HANDLER_ERROR = "error"
INVALID_REQUEST = "InvalidRequest"


@dataclass
class MethodCall:
    method: str
    arguments: Any = None

    def argument(self, key: str) -> Any:
        if isinstance(self.arguments, dict):
            return self.arguments.get(key)
        return None


@dataclass
class SuccessResponse:
    value: Any = None


@dataclass
class ErrorResponse:
    code: str
    message: Optional[str] = None
    details: Any = None


@dataclass
class NotImplementedResponse:
    method: str = ""


Response = Union[SuccessResponse, ErrorResponse, NotImplementedResponse]


def to_wire(request_id: Any, response: Response) -> Dict[str, Any]:
    if isinstance(response, SuccessResponse):
        return {"id": request_id, "result": response.value}
    if isinstance(response, ErrorResponse):
        return {
            "id": request_id,
            "error": {
                "code": response.code,
                "message": response.message,
                "details": response.details,
            },
        }
    return {"id": request_id, "notImplemented": True}
