"""
Utility helper functions
"""
import re
import secrets
import time
from typing import Any, Dict, List, Tuple


def sanitize_filename(name: str) -> str:
    """Strip path components and replace whitespace runs with underscores"""
    base = re.split(r"[\\/]", name or "")[-1]
    base = re.sub(r"\s+", "_", base.strip())
    base = base.lstrip(".")
    return base or "file"


def timestamp_millis() -> int:
    return int(time.time() * 1000)


def random_token(nbytes: int = 16) -> str:
    return secrets.token_hex(nbytes)


def file_extension(filename: str, default: str = "bin") -> str:
    if filename and "." in filename:
        ext = filename.rsplit(".", 1)[-1].lower()
        if re.fullmatch(r"[a-z0-9]{1,8}", ext):
            return ext
    return default


ESCAPE_CHAR = "\\"


def like_pattern(term: str) -> str:
    """Substring pattern for ilike() that matches LIKE wildcards literally; pair with ESCAPE_CHAR"""
    escaped = term.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def ensure_prefix(prefix: str) -> str:
    """Directory-style object prefixes always end in '/'"""
    return prefix if prefix.endswith("/") else prefix + "/"


def paginate(query, page: int, limit: int) -> Tuple[List[Any], Dict[str, int]]:
    """Apply offset/limit to a SQLAlchemy query and build the pagination block"""
    total = query.count()
    pages = max(1, (total + limit - 1) // limit)
    items = query.offset((page - 1) * limit).limit(limit).all()
    return items, {"page": page, "limit": limit, "total": total, "pages": pages}
