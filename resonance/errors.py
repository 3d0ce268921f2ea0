"""Exceptions raised by the Resonance catalog core."""


class ResonanceError(Exception):
    """Base class for catalog core errors."""


class ConfigError(ResonanceError):
    """Configuration is missing or inconsistent."""


class StoreUnavailableError(ResonanceError):
    """The catalog store could not be reached or failed mid-operation.

    This is the only error the catalog service lets through to callers;
    upstream failures degrade to empty results instead.
    """


class InvalidCatalogIdError(ResonanceError, ValueError):
    """An id that cannot be a catalog identifier (blank or non-numeric)."""

    def __init__(self, value):
        super().__init__(f"Invalid catalog id: {value!r}")
        self.value = value
