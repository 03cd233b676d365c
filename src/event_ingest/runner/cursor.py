"""
Cursor derivation from the earliest stored event.
"""

import logging

from ..core.errors import CursorParseError, EmptyStoreError
from ..core.models import CursorResult
from ..core.storage import DocumentStore
from ..core.timestamps import to_unix_seconds


logger = logging.getLogger(__name__)


def derive_cursor(store: DocumentStore, field: str = "created_date") -> CursorResult:
    """
    Compute the resumption cursor from the store.

    Queries the store for the single earliest document and converts its
    timestamp to unix seconds. The cursor is the `before_timestamp` for the
    next run.

    Args:
        store: Document store to query
        field: Timestamp field name

    Returns:
        CursorResult; `cursor` is None if the timestamp could not be parsed

    Raises:
        EmptyStoreError if the store holds no documents
        StoreReadError if the query fails
    """
    document = store.find_earliest(field)
    if document is None:
        raise EmptyStoreError(f"No documents in {store.get_name()} store; nothing to resume from")

    raw = document.get(field)
    raw_text = "" if raw is None else str(raw)

    try:
        cursor = to_unix_seconds(raw)
    except CursorParseError as e:
        logger.error(f"Could not parse earliest {field}: {e}")
        return CursorResult(raw_timestamp=raw_text, cursor=None, error_message=str(e))

    logger.info(f"Earliest {field} {raw_text} -> cursor {cursor}")
    return CursorResult(raw_timestamp=raw_text, cursor=cursor)
