"""
JSON canonicalization for schema fingerprints.

Generated validator modules carry a digest of the schemas they were built
from. The digest must not depend on dict ordering or on the Python run, so
schemas are canonicalized before hashing.

Note that canonical order is used for hashing only: property order is
meaningful for evaluation and is never reordered in the schema model.
"""

import hashlib
import json
from typing import Any


def canonicalize_json(obj: Any) -> dict | list | Any:
    """
    Produce a deterministic, canonical representation of a JSON object.

    - All dictionary keys are sorted alphabetically
    - Nested structures are recursively canonicalized
    - Lists keep their order

    Example:
        >>> canonicalize_json({"z": 1, "a": {"c": 2, "b": 3}})
        {'a': {'b': 3, 'c': 2}, 'z': 1}
    """
    if isinstance(obj, dict):
        return {k: canonicalize_json(v) for k, v in sorted(obj.items())}

    elif isinstance(obj, (list, tuple)):
        return [canonicalize_json(item) for item in obj]

    else:
        return obj


def to_canonical_json_string(obj: Any) -> str:
    """
    Convert a Python object to a canonical JSON string.

    Sorted keys and no extra whitespace, so equal content gives byte-for-byte
    equal strings.

    Example:
        >>> to_canonical_json_string({"type": "string", "minLength": 2})
        '{"minLength":2,"type":"string"}'
    """
    canonical = canonicalize_json(obj)
    return json.dumps(canonical, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def schema_digest(obj: Any) -> str:
    """
    SHA-256 digest of the canonical JSON form of a schema document.

    Returns:
        Digest string prefixed with the algorithm, e.g. "sha256:3f2a..."
    """
    payload = to_canonical_json_string(obj).encode("utf-8")
    return "sha256:" + hashlib.sha256(payload).hexdigest()
