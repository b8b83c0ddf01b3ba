"""Encode/decode for multiple-choice options stored in one text column.

Options are persisted as a JSON array string.  Every repository read
path calls ``decode_options`` and every write path calls
``encode_options``; no other module parses the column.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable

logger = logging.getLogger(__name__)


def encode_options(options: Iterable[str] | None) -> str | None:
    """Serialize an ordered list of option strings.

    Empty and missing lists are stored as NULL.
    """
    if options is None:
        return None
    values = [str(o) for o in options]
    if not values:
        return None
    return json.dumps(values, ensure_ascii=False)


def decode_options(raw: str | None) -> list[str]:
    """Deserialize the options column.  Never raises.

    NULL, empty and malformed values all read back as an empty list.
    """
    if raw is None or not raw.strip():
        return []
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning(
            "Undecodable options column (len=%d); treating as empty", len(raw)
        )
        return []
    if not isinstance(value, list):
        logger.warning(
            "Options column is %s, not a list; treating as empty",
            type(value).__name__,
        )
        return []
    return [str(v) for v in value]
