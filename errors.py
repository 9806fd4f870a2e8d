"""Exceptions raised by the ledger and mapped to HTTP responses by the API."""

from typing import Any, Optional


class FinanceTrackerError(Exception):
    """Base error with a human-readable message and a stable machine code."""

    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class ValidationError(FinanceTrackerError):
    """Input rejected before it reaches storage (non-positive amount, bad type...)."""

    code = "VALIDATION_ERROR"


class EntityNotFoundError(FinanceTrackerError):
    """Raised for get/update/delete on an id the ledger does not hold."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: int):
        super().__init__(f"{entity} not found", {"entity": entity, "id": entity_id})
        self.entity = entity
        self.entity_id = entity_id
