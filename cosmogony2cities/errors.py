"""Exceptions raised by the city import pipeline."""


class ZoneDecodeError(ValueError):
    """A single zone record could not be decoded. Recovered by skipping it."""


class LoadError(RuntimeError):
    """Any failure that aborts a load run."""


class StoreConnectionError(LoadError):
    pass


class RenderError(LoadError):
    pass


class StatementExecutionError(LoadError):
    def __init__(self, message: str, batch_index: int | None = None, row_count: int = 0):
        super().__init__(message)
        self.batch_index = batch_index
        self.row_count = row_count


class CosmogonyFormatError(ValueError):
    """The input file as a whole is not a cosmogony zone list. Fatal."""
