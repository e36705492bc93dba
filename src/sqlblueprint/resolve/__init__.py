from .iam import classify_identity, classify_identities
from .models import ResolvedConfig
from .resolver import resolve_config, keyed_by_name

__all__ = [
    "classify_identity",
    "classify_identities",
    "ResolvedConfig",
    "resolve_config",
    "keyed_by_name",
]
