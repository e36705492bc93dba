"""Custom exception classes for sqlblueprint."""


class SqlBlueprintError(Exception):
    """Base exception for all sqlblueprint errors."""
    pass


class ConfigError(SqlBlueprintError):
    """Raised when instance configuration or resolver settings are invalid or missing."""
    pass


class IdentityGenerationError(SqlBlueprintError):
    """Raised when the entropy source cannot produce identifiers."""
    pass


class ResolutionError(SqlBlueprintError):
    """Raised when configuration resolution fails unexpectedly."""
    pass


class GraphConstructionError(SqlBlueprintError):
    """Raised when resource graph construction fails."""
    pass
