from typing import Optional


class InterleaveError(Exception):
    """base class for everything weavy raises on its own"""
    pass


class InvalidInsertion(InterleaveError, ValueError):
    """an insertion request that is not a (non-negative int offset, item) pair"""

    def __init__(self, message: str, position: Optional[int] = None):
        self.position = position  # index of the bad request in the input collection
        if position is not None:
            message = f"insertion #{position}: {message}"
        super().__init__(message)


class OutOfRangeOffset(InterleaveError, IndexError):
    """an insertion offset lies past the end of the source"""

    def __init__(self, offset: int, source_length: int):
        self.offset = offset
        self.source_length = source_length
        super().__init__(f"insertion offset {offset} is out of range for a source of length {source_length}")
