from typing import Optional
import logging

from socialdata.db.store import DocumentStore

logger = logging.getLogger(__name__)

async def adjust_counter(
    store: DocumentStore,
    collection: str,
    doc_id: str,
    field: str,
    delta: int
) -> Optional[int]:
    """Read-modify-write a denormalized counter, floored at 0.

    Not atomic: two concurrent writers can read the same value and both
    write the same result, so the counter can drift by one per collision.
    Returns the new value, or None when the parent document is gone.
    """
    snapshot = await store.get(collection, doc_id)
    if snapshot is None:
        logger.debug(f"Skipping {field} update, {collection}/{doc_id} not found")
        return None

    current = snapshot.get(field) or 0
    new_value = max(0, current + delta)
    await store.update(collection, doc_id, {field: new_value})

    return new_value
