# hashvault/detector.py
import re

UNKNOWN = "unknown"

# checked in insertion order, first match wins
HASH_PATTERNS = {
    "md5":    re.compile(r"[a-f0-9]{32}", re.IGNORECASE),
    "sha1":   re.compile(r"[a-f0-9]{40}", re.IGNORECASE),
    "sha256": re.compile(r"[a-f0-9]{64}", re.IGNORECASE),
    "sha512": re.compile(r"[a-f0-9]{128}", re.IGNORECASE),
    "bcrypt": re.compile(r"\$2[aby]\$[0-9]{2}\$[./A-Za-z0-9]{53}"),
}


def detect(candidate) -> str:
    """
    Classify a string by shape alone. Length is authoritative for the hex
    digests; bcrypt is recognised by its `$2a$NN$` prefix. Never raises.
    """
    if not isinstance(candidate, str):
        return UNKNOWN
    for name, pattern in HASH_PATTERNS.items():
        if pattern.fullmatch(candidate):
            return name
    return UNKNOWN


def validate_hash(value: str, hash_type: str = None) -> dict:
    key = hash_type.lower() if isinstance(hash_type, str) else ""
    if key in HASH_PATTERNS:
        valid = bool(HASH_PATTERNS[key].fullmatch(value))
        detected = key
    else:
        detected = detect(value)
        valid = detected != UNKNOWN
    return {
        "valid": valid,
        "detectedType": detected,
        "length": len(value),
        "format": "valid" if valid else "invalid",
    }
