import logging
import uuid
from typing import Any, Optional

logger = logging.getLogger(__name__)


def to_uuid(value: Any) -> Optional[uuid.UUID]:
    """Coerce a UUID-like value (UUID, str) to uuid.UUID.

    Returns None for values that are not valid UUIDs, so callers can treat a
    malformed identifier the same way as an unknown one.

    Args:
        value: UUID instance, its string form, or anything else

    Returns:
        uuid.UUID or None
    """
    if value is None:
        return None
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (ValueError, AttributeError, TypeError):
        return None
