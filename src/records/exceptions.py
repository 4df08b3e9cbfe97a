class RecordStoreError(Exception):
    """Raised when the external record store fails (auth, schema, connectivity).

    Attributes:
        status_code: HTTP status code returned by the store, if any.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RecordNotFoundError(RecordStoreError):
    """Raised when a record addressed by id does not exist in the store."""

    def __init__(self, table: str, record_id: str) -> None:
        super().__init__(f"Record {record_id!r} not found in {table}", status_code=404)
        self.table = table
        self.record_id = record_id
