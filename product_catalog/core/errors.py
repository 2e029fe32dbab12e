from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence


class CatalogError(Exception):
    """Base class for all product-catalog errors."""


@dataclass(frozen=True)
class FieldViolation:
    """One failed constraint on one input field."""

    field: str
    reason: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field, "reason": self.reason, "message": self.message}


class ValidationError(CatalogError):
    """Input failed its declared constraints. Never reaches storage."""

    def __init__(self, violations: Sequence[FieldViolation]):
        self.violations = list(violations)
        fields = ", ".join(sorted({v.field for v in self.violations})) or "<input>"
        super().__init__(f"Validation failed for: {fields}")

    @property
    def fields(self) -> list[str]:
        return [v.field for v in self.violations]


class NotFoundError(CatalogError):
    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")


class StorageError(CatalogError):
    """The storage backend is unreachable or rejected the operation."""


class ConfigError(CatalogError):
    """Required startup configuration is missing or malformed."""
