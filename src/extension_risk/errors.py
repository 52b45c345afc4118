"""
Exception hierarchy for the extension risk analyzer

Every failure that can end an analysis request derives from AnalyzerError so
the web layer and the CLI can map them to a response in one place.
"""


class AnalyzerError(Exception):
    """Base class for all analysis pipeline failures"""


class InvalidInputError(AnalyzerError):
    """The supplied URL or extension ID is malformed or not allow-listed"""


class FetchError(AnalyzerError):
    """The package could not be downloaded or exceeded the size ceiling"""


class FormatError(AnalyzerError):
    """The package is not a supported CRX container"""


class ExtractionError(AnalyzerError):
    """The embedded archive is corrupt or could not be written to disk"""


class AnalysisError(AnalyzerError):
    """The manifest is missing or is not a JSON object"""


class ExternalToolError(AnalyzerError):
    """An external scanner failed, timed out or produced malformed output"""


class ConfigError(AnalyzerError):
    """The configuration file or environment overrides are invalid"""
