"""Exception types raised by the analysis pipeline"""


class AnalysisError(Exception):
    """Base class for all analysis failures"""


class InsufficientDataError(AnalysisError):
    """Not enough observed values to carry out a computation"""


class SingularMatrixError(AnalysisError):
    """Design matrix is rank-deficient or regression weights are degenerate"""


class MalformedInputError(AnalysisError):
    """Input table is missing columns or holds values that cannot be coerced"""


class ConfigurationError(AnalysisError):
    """Configuration file is unreadable or contains invalid settings"""
