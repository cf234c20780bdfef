"""Domain exceptions raised by services and translated by routers."""


class FactsError(Exception):
    """Base class for facts.hype backend errors."""


class ChainDataError(FactsError):
    """A chain snapshot failed boundary validation."""


class ChainUnavailableError(FactsError):
    """RPC reads failed and no last known snapshot exists."""


class DatabaseError(FactsError):
    """The metadata store rejected or failed an operation."""


class SourceValidationError(FactsError):
    """A sources payload failed validation."""


class QuestionNotFoundError(FactsError):
    """The contract has no question with the requested id."""
