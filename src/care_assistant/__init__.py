"""Care assistant package."""

from .config import RemoteProviderConfig, RuleBasedConfig
from .types import Answer, AnswerSource, ProviderHealth, Query

__all__ = [
    "Answer",
    "AnswerSource",
    "ProviderHealth",
    "Query",
    "RemoteProviderConfig",
    "RuleBasedConfig",
]
