"""Per-model context budget."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from agent_governor.exceptions import ConfigurationError

SAFE_CONTEXT_RATIO = 0.8


class ModelBudget(BaseModel):
    """Context capacity of a model, in token units.

    ``context`` accepts any finite positive int or float.  Strings and
    booleans are rejected rather than coerced, so a malformed model
    descriptor surfaces as a configuration error instead of a silently
    wrong budget.
    """

    model_config = ConfigDict(frozen=True)

    context: float = Field(gt=0, allow_inf_nan=False)
    name: str | None = None

    @field_validator("context", mode="before")
    @classmethod
    def _reject_non_numeric(cls, value: Any) -> Any:
        if isinstance(value, bool | str | bytes):
            msg = f"context must be a number, got {type(value).__name__}"
            raise ValueError(msg)
        return value

    @property
    def safe_limit(self) -> float:
        """80% of ``context``; the rest is reserved for the next response."""
        return self.context * SAFE_CONTEXT_RATIO

    @classmethod
    def from_descriptor(cls, descriptor: Any) -> ModelBudget:
        """Build a budget from a model descriptor mapping or object.

        Parameters:
            descriptor: A mapping with a ``context`` key, or any object
                with a ``context`` attribute.  A ``name`` is picked up
                when present.

        Raises:
            ConfigurationError: If the capacity is missing, non-numeric
                or not positive.
        """
        if isinstance(descriptor, ModelBudget):
            return descriptor
        if isinstance(descriptor, Mapping):
            context = descriptor.get("context")
            name = descriptor.get("name")
        else:
            context = getattr(descriptor, "context", None)
            name = getattr(descriptor, "name", None)

        if context is None:
            msg = "Model descriptor has no context capacity"
            raise ConfigurationError(msg, code="missing_context", details={"name": name})
        try:
            return cls(context=context, name=name if isinstance(name, str) else None)
        except ValidationError as e:
            msg = f"Invalid context capacity {context!r}"
            raise ConfigurationError(
                msg, code="invalid_context", details={"name": name, "context": repr(context)}
            ) from e
