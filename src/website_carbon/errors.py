# src/website_carbon/errors.py


class ScorecardError(Exception):
    """Base class for errors that end a scorecard run."""


class ConfigurationError(ScorecardError):
    """Invalid URL argument, unknown measurement mode or model, unreadable source file."""


class NoUrlsFound(ScorecardError):
    """Raised when every discovery strategy came back empty."""

    def __init__(self, message: str = "No valid URLs found to assess."):
        super().__init__(message)


class NoPagesMeasured(ScorecardError):
    """Raised when not a single page of the first-visit pass could be measured."""

    def __init__(self, message: str = "No pages could be measured."):
        super().__init__(message)
