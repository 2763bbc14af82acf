"""Exceptions raised by the quiz engine."""


class QuizError(Exception):
    """Base class for quiz errors."""


class FetchError(QuizError):
    """The reference table could not be retrieved."""


class ParseError(QuizError):
    """The reference table is malformed."""


class StorageParseError(QuizError):
    """The persisted progress blob is corrupt."""


class PersistenceWriteError(QuizError):
    """The progress blob could not be written."""
