"""Deterministic content hashes used for view, rig and intrinsic ids."""

import hashlib
from typing import Any

# Ids are kept in the unsigned 32-bit range so they round-trip through JSON
# and other tools that store them as uint32.
ID_BITS = 32
ID_MASK = (1 << ID_BITS) - 1


def _canonical(value: Any) -> str:
    """Render a value so that equal inputs always give equal text."""
    if isinstance(value, float):
        # repr() is the shortest round-tripping form, independent of locale
        return repr(float(value))
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonical(v) for v in value) + "]"
    return str(value)


def stable_hash(*parts: Any) -> int:
    """Hash the given parts into an unsigned 32-bit integer.

    Unlike the builtin ``hash``, the result does not depend on the process
    (no string hash randomization), so re-running on identical input yields
    identical ids.

    Args:
        *parts: Values to hash, combined in order

    Returns:
        Integer in [0, 2**32)
    """
    text = "\x1f".join(_canonical(p) for p in parts)
    digest = hashlib.blake2b(text.encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, "little") & ID_MASK


def path_hash(path: str) -> int:
    """Stable id for a filesystem path string."""
    return stable_hash("path", path)
