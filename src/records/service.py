from records.airtable import AirtableRecordStore

_record_store: AirtableRecordStore | None = None


def get_record_store() -> AirtableRecordStore:
    """Get the record store singleton.

    Built lazily so that a missing Airtable configuration only fails the
    requests that need the store, not the whole process at import time.

    Returns:
        The AirtableRecordStore instance.
    """
    global _record_store
    if _record_store is None:
        _record_store = AirtableRecordStore()
    return _record_store
