"""agent-governor: Runtime governor for LLM agents.

Session:
    TurnGovernor

Token Estimation:
    TokenEstimator, TiktokenCounter, estimate_tokens, get_default_counter

Context Window:
    ContextWindowTrimmer, trim_history, FIFOEviction, ImportanceEviction,
    context_usage_percent

Stopping Conditions:
    StoppingConditionManager, StoppingConfig, StopDecision, RunStats,
    CriteriaResult, create_stop_when, estimate_usage_cost

Resilience:
    RetryPolicy, retry_with_backoff, CancellationToken, abortable_stream,
    RecoveryStrategy, execute_with_recovery, StreamHandlers,
    handle_stream_with_errors, run_with_timeout, CircuitBreaker,
    CircuitBreakerRegistry

Models:
    Message, TextPart, ToolCallPart, ToolResultPart, ModelBudget,
    Completed, Aborted, Failed

Observability:
    GovernorObserver, LoggingObserver, InMemoryObserver

Protocols:
    Tokenizer, EvictionPolicy, GovernorObserver

Exceptions:
    GovernorError, ConfigurationError, HistoryValidationError, FatalError,
    TransientError, OperationTimeoutError, ToolExecutionError,
    OperationAborted, CircuitOpenError
"""

from importlib.metadata import PackageNotFoundError, version

from agent_governor.context import (
    ContextWindowTrimmer,
    FIFOEviction,
    ImportanceEviction,
    context_usage_percent,
    trim_history,
)
from agent_governor.exceptions import (
    CircuitOpenError,
    ConfigurationError,
    FatalError,
    GovernorError,
    HistoryValidationError,
    OperationAborted,
    OperationTimeoutError,
    ToolExecutionError,
    TransientError,
)
from agent_governor.models import (
    Aborted,
    Completed,
    CriteriaResult,
    Failed,
    Message,
    ModelBudget,
    Outcome,
    RunStats,
    StopCondition,
    StopDecision,
    StoppingConfig,
    TextPart,
    ToolCallPart,
    ToolResultPart,
    validate_history,
)
from agent_governor.observability import InMemoryObserver, LoggingObserver
from agent_governor.protocols import EvictionPolicy, GovernorObserver, Tokenizer
from agent_governor.resilience import (
    CancellationToken,
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitBreakerRegistry,
    RecoveryStrategy,
    RetryPolicy,
    StreamHandlers,
    abortable_stream,
    execute_with_recovery,
    handle_stream_with_errors,
    retry_with_backoff,
    run_with_timeout,
)
from agent_governor.session import TurnGovernor
from agent_governor.stopping import (
    StoppingConditionManager,
    create_stop_when,
    estimate_usage_cost,
)
from agent_governor.tokens import (
    TiktokenCounter,
    TokenEstimator,
    estimate_tokens,
    get_default_counter,
)

try:
    __version__ = version("agent-governor")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

__all__ = [
    "Aborted",
    "CancellationToken",
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitBreakerRegistry",
    "CircuitOpenError",
    "Completed",
    "ConfigurationError",
    "ContextWindowTrimmer",
    "CriteriaResult",
    "EvictionPolicy",
    "FIFOEviction",
    "Failed",
    "FatalError",
    "GovernorError",
    "GovernorObserver",
    "HistoryValidationError",
    "ImportanceEviction",
    "InMemoryObserver",
    "LoggingObserver",
    "Message",
    "ModelBudget",
    "OperationAborted",
    "OperationTimeoutError",
    "Outcome",
    "RecoveryStrategy",
    "RetryPolicy",
    "RunStats",
    "StopCondition",
    "StopDecision",
    "StoppingConditionManager",
    "StoppingConfig",
    "StreamHandlers",
    "TextPart",
    "TiktokenCounter",
    "TokenEstimator",
    "Tokenizer",
    "ToolCallPart",
    "ToolExecutionError",
    "ToolResultPart",
    "TransientError",
    "TurnGovernor",
    "__version__",
    "abortable_stream",
    "context_usage_percent",
    "create_stop_when",
    "estimate_tokens",
    "estimate_usage_cost",
    "execute_with_recovery",
    "get_default_counter",
    "handle_stream_with_errors",
    "retry_with_backoff",
    "run_with_timeout",
    "trim_history",
    "validate_history",
]
