"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidInputError(DomainException):
    """Amounts, quantities or payment condition settings are invalid"""

    pass


class NotFoundError(DomainException):
    """Referenced record does not exist"""

    pass
