# hashvault/digests.py
import hashlib
import hmac

import bcrypt

PLAIN_ALGORITHMS = ("md5", "sha1", "sha256", "sha512")
HMAC_ALGORITHMS = PLAIN_ALGORITHMS
DEFAULT_BCRYPT_ROUNDS = 10


def _hasher(algo: str):
    algo = (algo or "").lower()
    if algo in PLAIN_ALGORITHMS:
        return getattr(hashlib, algo)
    return None


def hash_bytes(data: bytes, algo: str) -> str:
    h = _hasher(algo)
    if h is None:
        return None
    return h(data).hexdigest()


def hash_word(word: str, algo: str) -> str:
    return hash_bytes(word.encode(), algo)


def bcrypt_hash(word: str, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> str:
    return bcrypt.hashpw(word.encode(), bcrypt.gensalt(rounds=rounds)).decode()


def hmac_hex(message: str, key: str, algo: str = "sha256") -> str:
    h = _hasher(algo)
    if h is None:
        raise ValueError(f"Unsupported HMAC algorithm: {algo}")
    return hmac.new(key.encode(), message.encode(), h).hexdigest()


def generate_hashes(text: str, hash_types, bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS) -> dict:
    """
    Digest `text` with every requested algorithm. Unknown types are ignored,
    so the result may hold fewer keys than were asked for.
    """
    out = {}
    for t in hash_types:
        algo = str(t).lower()
        if algo == "bcrypt":
            out["bcrypt"] = bcrypt_hash(text, bcrypt_rounds)
        elif algo in PLAIN_ALGORITHMS:
            out[algo] = hash_word(text, algo)
    return out


def generate_file_hashes(data: bytes, hash_types) -> dict:
    # bcrypt is never applied to file content
    out = {}
    for t in hash_types:
        algo = str(t).lower()
        if algo in PLAIN_ALGORITHMS:
            out[algo] = hash_bytes(data, algo)
    return out


def compare_hashes(first: str, second: str) -> bool:
    return first.strip().lower() == second.strip().lower()
