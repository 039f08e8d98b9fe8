"""Exception hierarchy for the linear algebra package."""


class LinAlgError(Exception):
    pass


class DimensionError(LinAlgError, ValueError):
    pass


class SingularMatrixError(LinAlgError):
    pass


class NotSymmetricError(LinAlgError, ValueError):
    pass


class InvalidParameterError(LinAlgError, ValueError):
    pass