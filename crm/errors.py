class StorageError(Exception):
    """Base class for failures raised by the data store."""


class ConcurrentUpdateError(StorageError):
    """The row's stored version moved on between the read and the write."""

    def __init__(self, entity: str, entity_id: int, expected: int, found: int) -> None:
        super().__init__(
            f"{entity} {entity_id} was modified concurrently "
            f"(expected version {expected}, stored version {found})"
        )
        self.entity = entity
        self.entity_id = entity_id
        self.expected = expected
        self.found = found


class RecordNotFoundError(StorageError):
    """An update or delete targeted an id with no stored row."""

    def __init__(self, entity: str, entity_id: int) -> None:
        super().__init__(f"{entity} {entity_id} does not exist")
        self.entity = entity
        self.entity_id = entity_id


class AnalyticsError(RuntimeError):
    pass
