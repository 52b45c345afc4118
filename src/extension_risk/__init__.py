"""
Chrome Extension Risk Analyzer
Downloads a Chrome extension and produces a weighted security/privacy risk report
"""

__version__ = "0.1.0"

from .errors import (
    AnalyzerError,
    InvalidInputError,
    FetchError,
    FormatError,
    ExtractionError,
    AnalysisError,
    ExternalToolError,
    ConfigError,
)

__all__ = [
    "AnalyzerError",
    "InvalidInputError",
    "FetchError",
    "FormatError",
    "ExtractionError",
    "AnalysisError",
    "ExternalToolError",
    "ConfigError",
]
