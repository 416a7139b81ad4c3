"""Pydantic models and tagged value types for agent-governor."""

from .budget import SAFE_CONTEXT_RATIO, ModelBudget
from .defaults import (
    default_retry_policy,
    default_stopping_config,
    provider_retry_policy,
    transient_retry_policy,
)
from .messages import (
    ContentPart,
    Message,
    Role,
    TextPart,
    ToolCallPart,
    ToolResultPart,
    validate_history,
)
from .outcome import Aborted, Completed, Failed, Outcome
from .run_state import (
    CriteriaResult,
    RunStats,
    StopCondition,
    StopDecision,
    StoppingConfig,
)
from .streaming import (
    AbortChunk,
    DataChunk,
    ErrorChunk,
    StreamChunk,
    ToolErrorChunk,
    classify_chunk,
)

__all__ = [
    "SAFE_CONTEXT_RATIO",
    "AbortChunk",
    "Aborted",
    "Completed",
    "ContentPart",
    "CriteriaResult",
    "DataChunk",
    "ErrorChunk",
    "Failed",
    "Message",
    "ModelBudget",
    "Outcome",
    "Role",
    "RunStats",
    "StopCondition",
    "StopDecision",
    "StoppingConfig",
    "StreamChunk",
    "TextPart",
    "ToolCallPart",
    "ToolErrorChunk",
    "ToolResultPart",
    "classify_chunk",
    "default_retry_policy",
    "default_stopping_config",
    "provider_retry_policy",
    "transient_retry_policy",
    "validate_history",
]
