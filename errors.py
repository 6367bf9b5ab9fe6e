"""
Error types raised by the store and the integrity guard.
"""


class CatalogError(Exception):
    """Base class for catalog errors."""


class NotFound(CatalogError):
    def __init__(self, model, record_id):
        self.model = model
        self.record_id = record_id
        super().__init__(f"{model.__name__} {record_id} not found")


class DuplicateKeyError(CatalogError):
    def __init__(self, model, message="Duplicate key"):
        self.model = model
        super().__init__(message)


class ValidationError(CatalogError):
    """
    Raised by the store when a required column is empty.

    Form validation reports errors on the form itself; this only fires if a
    payload bypassed the forms.
    """

    def __init__(self, model, fields):
        self.model = model
        self.fields = list(fields)
        super().__init__(f"{model.__name__} is missing required fields: {', '.join(self.fields)}")


class IntegrityViolation(CatalogError):
    """
    Raised when a delete is refused because other records still reference
    the target. ``dependents`` lists exactly those records.
    """

    def __init__(self, record, dependents):
        self.record = record
        self.dependents = list(dependents)
        super().__init__(
            f"{type(record).__name__} {record.id} has {len(self.dependents)} dependent record(s)"
        )
