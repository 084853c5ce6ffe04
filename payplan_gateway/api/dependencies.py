"""Dependency injection for FastAPI endpoints"""

import uuid
from datetime import date
from fastapi import HTTPException, Request
from payplan_gateway.config import settings


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_today() -> date:
    """Current date for plan and period calculations; overridden in tests"""
    return date.today()


def get_strict_mode() -> bool:
    """Whether malformed payment conditions are rejected instead of yielding empty plans"""
    return settings.strict_payment_conditions


def parse_id(value: str, label: str) -> uuid.UUID:
    """Parse a path/body identifier, answering 400 when it is not a UUID"""
    try:
        return uuid.UUID(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {label} ID format")
