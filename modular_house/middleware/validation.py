import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Type

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

# Never written to logs in clear text
REDACTED_FIELDS = {"email", "phone", "address", "eircode", "message", "password", "firstName", "lastName"}
REDACTED = "[redacted]"

LOCATION_NAMES = {"body": "body", "query": "query parameters", "path": "path parameters"}


@dataclass
class FieldError:
    field: str
    message: str
    code: str
    received: Any = None

    def to_dict(self) -> dict:
        data = {"field": self.field, "message": self.message, "code": self.code}
        if self.received is not None:
            data["received"] = self.received
        return data


@dataclass
class ValidationResult:
    success: bool
    errors: List[FieldError] = field(default_factory=list)
    data: Optional[BaseModel] = None


def _received(error: dict, redact: bool) -> Any:
    value = error.get("input")
    if isinstance(value, (dict, list)):
        # Whole objects are not echoed back, only scalar offending values
        return None
    if redact and error.get("loc") and str(error["loc"][-1]) in REDACTED_FIELDS:
        return REDACTED
    return value


def format_errors(errors: List[dict], strip_location: bool = True, redact: bool = False) -> List[FieldError]:
    formatted = []
    for error in errors:
        loc = list(error.get("loc", ()))
        if strip_location and loc and loc[0] in LOCATION_NAMES:
            loc = loc[1:]
        formatted.append(FieldError(
            field=".".join(str(part) for part in loc) or "root",
            message=error.get("msg", "Invalid value"),
            code=error.get("type", "invalid"),
            received=_received(error, redact),
        ))
    return formatted


def redact(data: Any) -> Any:
    if isinstance(data, dict):
        return {k: (REDACTED if k in REDACTED_FIELDS else redact(v)) for k, v in data.items()}
    if isinstance(data, list):
        return [redact(item) for item in data]
    return data


def validate_data(model: Type[BaseModel], data: Any) -> ValidationResult:
    """Validate arbitrary data outside a request."""
    try:
        return ValidationResult(success=True, data=model.model_validate(data))
    except ValidationError as e:
        return ValidationResult(success=False, errors=format_errors(e.errors(), strip_location=False))


def _describe(locations: set) -> str:
    if locations == {"body"}:
        return "The request body contains invalid data"
    if locations == {"query"}:
        return "The request query parameters contain invalid data"
    if locations == {"path"}:
        return "The request path parameters contain invalid data"
    return "The request contains invalid data"


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    details = format_errors(errors)
    locations = {e["loc"][0] for e in errors if e.get("loc") and e["loc"][0] in LOCATION_NAMES}

    logger.warning(
        f"⚠️ Validation failed {request.method} {request.url.path} "
        f"ip={request.client.host if request.client else 'unknown'} "
        f"errors={[d.to_dict() for d in format_errors(errors, redact=True)]} "
        f"body={redact(exc.body) if isinstance(exc.body, (dict, list)) else '<omitted>'}"
    )

    return JSONResponse(
        status_code=400,
        content={
            "error": "Validation Error",
            "message": _describe(locations),
            "details": [d.to_dict() for d in details],
        },
    )
