"""Legal Anonymizer — detect and anonymize personal data in Brazilian legal documents."""

import logging

from .redactor import Redactor, RedactorConfig
from .detector import PatternDetector, detect
from .session import Session
from .techniques import apply
from .config import load_config, load_from_yaml, load_options
from .errors import (
    AnonymizationError,
    AnonymizerError,
    ConfigError,
    SessionClosedError,
    UnsupportedTechniqueError,
)
from .types import (
    AnonymizationOptions,
    AnonymizationResult,
    DataType,
    DetectedPattern,
    ProcessingResult,
    ProcessingSummary,
    Technique,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Redactor", "RedactorConfig",
    "PatternDetector", "detect",
    "Session",
    "apply",
    "load_config", "load_from_yaml", "load_options",
    "AnonymizerError", "AnonymizationError", "ConfigError",
    "SessionClosedError", "UnsupportedTechniqueError",
    "AnonymizationOptions", "AnonymizationResult", "DataType", "DetectedPattern",
    "ProcessingResult", "ProcessingSummary", "Technique",
]
__version__ = "0.1.0"
