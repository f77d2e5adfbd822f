"""National ID (CPF) normalization used as the client matching key"""

import re
from typing import Optional

_NON_DIGITS = re.compile(r"\D")


def normalize_cpf(raw: Optional[str]) -> str:
    """Strip every non-digit character; absent input normalizes to an empty string"""
    if not raw:
        return ""
    return _NON_DIGITS.sub("", str(raw))


def same_client(a: Optional[str], b: Optional[str]) -> bool:
    """Two IDs identify the same client iff they normalize to equal, non-empty keys"""
    key = normalize_cpf(a)
    return bool(key) and key == normalize_cpf(b)
