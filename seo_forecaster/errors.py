class ForecastError(ValueError):
    """Base class for errors raised while building a forecast."""


class ValidationError(ForecastError):
    """Settings or sweep parameters are outside their allowed range."""


class MalformedKeywordError(ForecastError):
    """The keyword set is empty or a keyword record is corrupt."""

    def __init__(self, message: str, keyword=None):
        super().__init__(message)
        self.keyword = keyword


class KeywordImportError(ValueError):
    """An uploaded keyword file could not be turned into keywords."""
