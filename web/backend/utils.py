#!/usr/bin/env python3
"""
Utility functions for the web application.
"""

import uuid
from decimal import Decimal
from typing import Optional, Any
from datetime import datetime

from fastapi import HTTPException
from pydantic.alias_generators import to_camel


def validate_uuid(value: Optional[str], name: str = "id") -> uuid.UUID:
    """Parse a path/header identifier or reject the request with 400."""
    try:
        return uuid.UUID(str(value))
    except (ValueError, TypeError):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid {name} format: {value}. Must be a valid UUID."
        )


def camelize_keys(value: Any) -> Any:
    """Recursively rename dict keys to camelCase, for free-form JSON payloads."""
    if isinstance(value, dict):
        return {to_camel(str(k)): camelize_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [camelize_keys(v) for v in value]
    return value


def safe_float(value: Optional[Any], default: float = 0.0) -> float:
    """
    Safely convert value to float.

    Args:
        value: Value to convert (can be Decimal, int, float, or None).
        default: Default value if conversion fails or value is None.

    Returns:
        Float value.
    """
    if value is None:
        return default

    if isinstance(value, Decimal):
        return float(value)

    try:
        return float(value)
    except (ValueError, TypeError):
        return default


def safe_int(value: Optional[Any], default: int = 0) -> int:
    """Safely convert value to int."""
    if value is None:
        return default

    try:
        return int(value)
    except (ValueError, TypeError):
        return default


def safe_datetime_iso(dt: Optional[datetime]) -> Optional[str]:
    """
    Safely convert datetime to ISO format string.

    Args:
        dt: Datetime object.

    Returns:
        ISO format string or None.
    """
    if dt is None:
        return None
    return dt.isoformat()
