"""
Exceptions raised by the galaxy query layer.

  GalaxyError            — base class for recoverable, caller-facing errors
  ConfigError            — configuration file missing, unreadable or malformed
  UnknownStarError       — star id that the generation engine cannot resolve
  UnmappedVariantError   — an enum member without a label (programming error)

An unbound session is NOT an exception: queries return empty results and
report the condition through `GalaxySession.last_diagnostic`.
"""

from __future__ import annotations


class GalaxyError(Exception):
    """Base class for galaxy query errors"""


class ConfigError(GalaxyError):
    """Generator configuration could not be loaded or validated"""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)


class UnknownStarError(GalaxyError, LookupError):
    """Star id does not resolve to a generated star"""

    def __init__(self, star_id: int, reason: str = ""):
        self.star_id = star_id
        msg = f"Unknown star id {star_id}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class UnmappedVariantError(AssertionError):
    """
    Raised when an enumerated type has no label mapping.
    The data model and the projection tables have drifted apart; this must
    never be silenced with a default label.
    """
