"""Identifier generation."""

import uuid


def new_id(prefix: str) -> str:
    """Generate a unique ID like ``BK-1A2B3C4D5E6F``.

    Args:
        prefix: Resource prefix (BK, ORD, PRD, CON, SUB, USR)

    Returns:
        Prefixed upper-case hex identifier
    """
    return f"{prefix}-{uuid.uuid4().hex[:12].upper()}"
