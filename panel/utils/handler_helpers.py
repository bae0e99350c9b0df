"""
Helper functions for handler operations.

Provides convenience wrappers for common handler patterns.
"""
import json
from contextlib import asynccontextmanager
from typing import Type, TypeVar

from aiohttp import web
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from core.exceptions import ValidationError
from panel.app_keys import DB_KEY

ServiceType = TypeVar("ServiceType")
DTOType = TypeVar("DTOType", bound=BaseModel)


@asynccontextmanager
async def service_context(request: web.Request, service_class: Type[ServiceType], **kwargs):
    """
    Context manager for service execution.
    
    Opens a session from the application's database, instantiates the
    service with it and commits on success (rolls back otherwise).
    
    Usage:
        async with service_context(request, PaymentStatusService) as service:
            ambassador = await service.set_order_paid(1, "A-100", True)
    """
    async with request.app[DB_KEY].session() as session:
        yield service_class(session, **kwargs)


async def read_dto(request: web.Request, dto_class: Type[DTOType]) -> DTOType:
    """
    Parse the JSON body into a DTO.
    
    Raises:
        ValidationError: body is not JSON or fails DTO validation
    """
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("body", "must be valid JSON")
    if not isinstance(payload, dict):
        raise ValidationError("body", "must be a JSON object")
    return parse_dto(dto_class, payload)


def parse_dto(dto_class: Type[DTOType], payload: dict) -> DTOType:
    """Validate a mapping into a DTO, converting pydantic errors."""
    try:
        return dto_class.model_validate(payload)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "body"
        raise ValidationError(field, first.get("msg", "invalid value"))


def path_int(request: web.Request, name: str) -> int:
    """Read an integer path parameter."""
    value = request.match_info.get(name, "")
    try:
        return int(value)
    except ValueError:
        raise ValidationError(name, f"must be an integer, got '{value}'")
