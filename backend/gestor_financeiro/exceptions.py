"""
Exception hierarchy shared by services and API routes.
"""


class GestorError(Exception):
    """Base class for application errors."""


class StoreError(GestorError):
    """The relational store could not be reached or rejected the operation."""


class NotFoundError(GestorError):
    """An entity addressed by id does not exist."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class ExtractionError(GestorError):
    """The LLM call failed or its response could not be parsed."""


class ValidationFailure(GestorError):
    """The LLM answer does not match the current taxonomy."""


class ConflictError(GestorError):
    """The entity is still referenced and cannot be removed."""
