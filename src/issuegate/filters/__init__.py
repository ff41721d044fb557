from .base import BaseFilter
from .baseline import BaselineFilter
from .config_rules import ConfigRuleFilter
from .inline import DEFAULT_MARKER, InlineSuppressionFilter

__all__ = [
    "BaseFilter",
    "BaselineFilter",
    "ConfigRuleFilter",
    "InlineSuppressionFilter",
    "DEFAULT_MARKER",
]
