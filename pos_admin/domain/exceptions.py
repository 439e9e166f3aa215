"""Domain-specific exceptions: framework-independent."""

GENERIC_FAILURE_MESSAGE = "Operation failed"


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class DuplicateEntityError(Exception):
    """Raised when attempting to create a duplicate entity."""

    def __init__(self, entity_type: str, field: str, value: str):
        self.entity_type = entity_type
        self.field = field
        self.value = value
        super().__init__(f"{entity_type} with {field}='{value}' already exists")


class SchemaDefinitionError(Exception):
    """Raised when an entity schema definition is malformed."""

    def __init__(self, entity_type: str, message: str):
        self.entity_type = entity_type
        super().__init__(f"[{entity_type}] {message}")


class RepositoryFailure(Exception):
    """Raised when the record repository reports or suffers a failure.

    Covers both server-reported ``success: false`` responses and transport
    problems (non-2xx status, connection errors). ``message`` is what the
    user sees, verbatim.
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        resource: str = "",
        status_code: int | None = None,
    ):
        self.message = message or GENERIC_FAILURE_MESSAGE
        self.resource = resource
        self.status_code = status_code
        super().__init__(self.message)


class DuplicateKeyViolation(RepositoryFailure):
    """The backend rejected a record whose key already exists."""
