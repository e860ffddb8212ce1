"""
Error types raised by the candidate board.
"""


class Lotto645Error(Exception):
    """Base class for all board errors"""


class EmptyDatasetError(Lotto645Error, ValueError):
    """The raw feed has no usable (non-placeholder) draw"""


class InvalidParameterError(Lotto645Error, ValueError):
    """A board parameter is non-numeric or out of its allowed range"""


class RoundNotFoundError(Lotto645Error, LookupError):
    """A historical round has no draw record"""

    def __init__(self, round_number):
        self.round_number = round_number
        super().__init__(f"No draw recorded for round {round_number}")
