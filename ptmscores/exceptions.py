"""Module containing the errors raised by the scoring engines."""


class PTMScoreError(Exception):
    """Base class of all errors raised while scoring modification sites."""

    _error_code = "PTM_SCORE_ERROR"

    def __init__(self, msg: str = ""):
        self._msg = msg
        super().__init__(msg)

    @property
    def error_code(self):
        return self._error_code

    @property
    def msg(self):
        return self._msg

    def __str__(self):
        return f"{self._error_code}: {self._msg}"


class InvalidInputError(PTMScoreError, ValueError):
    """Raise when the peptide, modifications, spectrum or settings cannot be scored.

    Covers empty modification lists, modifications absent from the peptide,
    fewer possible sites than modifications to place and settings that leave
    no peak to score.
    """

    _error_code = "INVALID_INPUT"


class InternalConsistencyError(PTMScoreError, ArithmeticError):
    """Raise when a computed value breaks an invariant of the scoring.

    Probabilities outside [0, 1] beyond the resolution limit, percentages
    outside [0, 100] and possible sites left without a score end up here.
    """

    _error_code = "INTERNAL_CONSISTENCY"
