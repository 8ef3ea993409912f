from .protocols import UpdateResolver
from .ncu_resolver import NcuResolver

__all__ = ["UpdateResolver", "NcuResolver"]
