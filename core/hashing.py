"""
Content fingerprints for Flatpak modules.

A module's fingerprint is the SHA-256 hex digest of its manifest form
serialized as canonical JSON (sorted keys, no insignificant whitespace).
It only depends on the module's content, so it is stable across runs and
machines, and it names the module's file in the database.
"""

import hashlib
import json

from core.codec import module_to_dict
from core.models import FlatpakModule


def get_module_hash(module: FlatpakModule) -> str:
    canonical = json.dumps(
        module_to_dict(module),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
