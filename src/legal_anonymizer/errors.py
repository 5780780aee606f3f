"""Exception hierarchy."""

from __future__ import annotations


class AnonymizerError(Exception):
    """Base class for every error raised by legal_anonymizer."""


class AnonymizationError(AnonymizerError):
    """A processing run failed as a whole.

    The caller must not treat the source text as safe to share: no partially
    substituted output is ever returned alongside this error.
    """


class UnsupportedTechniqueError(AnonymizerError, ValueError):
    """Technique unknown, or not legal for the requested data type."""


class SessionClosedError(AnonymizerError, RuntimeError):
    """A session was used after teardown."""


class ConfigError(AnonymizerError, ValueError):
    """Invalid options, config file or lexicon."""
