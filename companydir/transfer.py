"""
Export, import and wipe of every collection the directory owns.
"""

import json
from typing import Any, Dict

from .codec import (
    BLOCKED,
    COLLECTIONS,
    COMPANIES,
    FOLLOWED,
    REVIEWS,
    SALARY_REPORTS,
    RecordCodec,
    decode_blocked,
    decode_companies,
    decode_follows,
    decode_reviews,
    decode_salary_reports,
)

DECODERS = {
    COMPANIES: decode_companies,
    REVIEWS: decode_reviews,
    BLOCKED: decode_blocked,
    FOLLOWED: decode_follows,
    SALARY_REPORTS: decode_salary_reports,
}


def export_data(codec: RecordCodec) -> str:
    """Pretty JSON of every stored collection, keyed by collection name."""
    data: Dict[str, Any] = {}
    for collection in COLLECTIONS:
        raw = codec.read_raw(collection)
        if not raw:
            continue
        try:
            data[collection] = json.loads(raw)
        except ValueError as e:
            codec.logger.warning(
                "Skipping unreadable collection in export",
                collection=collection,
                error=str(e),
            )
    return json.dumps(data, indent=2, ensure_ascii=False)


def import_data(codec: RecordCodec, json_data: str) -> bool:
    """
    Replace each collection present in ``json_data``.

    Every collection is decoded before anything is written, so a malformed
    payload leaves the store untouched. Returns False in that case.
    """
    try:
        data = json.loads(json_data)
        if not isinstance(data, dict):
            raise TypeError("import payload must be an object")
        for collection, decode in DECODERS.items():
            if data.get(collection):
                decode(data[collection])
    except (ValueError, TypeError, AttributeError) as e:
        codec.logger.error("Failed to import data", error=str(e))
        return False

    ok = True
    for collection in COLLECTIONS:
        if data.get(collection):
            ok = codec.write_raw(collection, json.dumps(data[collection], ensure_ascii=False)) and ok
    return ok


def clear_all(codec: RecordCodec) -> None:
    for collection in COLLECTIONS:
        codec.remove(collection)
