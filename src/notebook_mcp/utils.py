"""Clock and name helpers shared by storage and service code."""

from __future__ import annotations

import hashlib
import re
from datetime import datetime, timezone
from typing import Iterable, Optional

_INVALID_FILE_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')

# Well under the common 255-byte file name limit, leaving room for the hash
# suffix and the ".json.tmp" extension.
MAX_STEM_BYTES = 120
_HASH_CHARS = 16


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def name_key(name: str) -> str:
    """Case-insensitive key shared by notebook and page names."""
    return name.casefold()


def page_key(name: str) -> str:
    return name_key(name)


def _truncate_utf8(txt: str, limit: int) -> str:
    out = []
    used = 0
    for ch in txt:
        size = len(ch.encode("utf-8"))
        if used + size > limit:
            break
        out.append(ch)
        used += size
    return "".join(out)


def file_key(notebook_name: str) -> str:
    """
    Map a notebook name to a file stem.

    Names differing only by case (or by invalid path characters) share a stem,
    and therefore share a file and a lock. Stems longer than MAX_STEM_BYTES
    are cut and suffixed with a hash of the full case-folded name.
    """
    folded = name_key(notebook_name)
    txt = _INVALID_FILE_CHARS.sub("_", folded)
    if not txt.strip("."):
        txt = "_"
    if len(txt.encode("utf-8")) <= MAX_STEM_BYTES:
        return txt
    digest = hashlib.sha256(folded.encode("utf-8")).hexdigest()[:_HASH_CHARS]
    head = _truncate_utf8(txt, MAX_STEM_BYTES - _HASH_CHARS - 1)
    return f"{head}-{digest}"


def find_page_key(keys: Iterable[str], page: str) -> Optional[str]:
    wanted = page_key(page)
    for key in keys:
        if page_key(key) == wanted:
            return key
    return None
