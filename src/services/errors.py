"""Domain exceptions for the dues ledger.

Provides domain-specific exceptions for clear error handling and reporting.
"""


class HoaError(Exception):
    """Base exception for ledger errors."""

    pass


class NotFoundError(HoaError):
    """Referenced fee, fine, payment or member does not exist."""

    def __init__(self, entity: str, entity_id: int | str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class InvalidInputError(HoaError):
    """Missing or invalid field; raised before anything is written."""

    pass


class InvalidTransitionError(InvalidInputError):
    """Payment is not in a state that allows the requested transition."""

    pass


class CollaboratorError(HoaError):
    """Blob store or notification delivery failed.

    Always caught and logged by callers; never aborts a ledger write.
    """

    pass


__all__ = [
    "HoaError",
    "NotFoundError",
    "InvalidInputError",
    "InvalidTransitionError",
    "CollaboratorError",
]
