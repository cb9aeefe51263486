# hashvault/wordlist_gen.py
import logging

logger = logging.getLogger(__name__)

MAX_CANDIDATES = 50_000

LEET_MAP = {"a": "4", "e": "3", "i": "1", "o": "0", "s": "5", "t": "7"}

AFFIXES = ("a", "test", "user", "admin")
SUFFIXES = ("!", "123", "1")

COMMON_WORDS = [
    "", "password", "123456", "123456789", "12345678", "12345", "1234567",
    "password123", "admin", "qwerty", "abc123", "Password1", "welcome",
    "monkey", "dragon", "letmein", "trustno1", "sunshine", "master",
    "hello", "world", "test", "user", "guest", "root", "toor", "pass",
    "secret", "love", "god", "money", "live", "forever", "cookie",
    "monster", "blue", "red", "green", "black", "white", "yellow", "orange",
    "purple", "pink", "brown", "gray", "silver", "gold", "diamond", "ruby",
    "emerald", "sapphire", "pearl", "crystal", "magic", "wizard",
    "phoenix", "tiger", "lion", "eagle", "wolf", "bear", "shark", "dolphin",
    "butterfly", "flower", "rose", "lily", "daisy", "tulip", "orchid",
    "spring", "summer", "autumn", "winter", "january", "february", "march",
    "april", "may", "june", "july", "august", "september", "october",
    "november", "december", "monday", "tuesday", "wednesday", "thursday",
    "friday", "saturday", "sunday", "morning", "afternoon", "evening", "night",
    "midnight", "sunrise", "sunset", "rainbow", "moonlight",
    "starlight", "galaxy", "universe", "earth", "mars", "venus", "jupiter",
    "saturn", "neptune", "pluto", "sun", "moon", "star", "planet", "comet",
    "meteor", "asteroid", "space", "time", "light", "dark", "bright", "shadow",
    "fire", "water", "air", "ice", "snow", "rain", "cloud", "storm",
    "thunder", "lightning", "wind", "breeze", "ocean", "sea", "lake", "river",
    "mountain", "valley", "forest", "desert", "jungle", "field", "garden",
    "park", "street", "road", "path", "bridge", "house", "home", "family",
    "friend", "heart", "soul", "mind", "body", "spirit", "angel",
    "devil", "heaven", "hell", "peace", "war", "hope", "faith", "trust",
    "truth", "lie", "good", "evil", "right", "wrong", "yes", "no", "maybe",
    "always", "never", "sometimes", "here", "there", "everywhere", "nowhere",
    "something", "nothing", "everything", "anything", "someone", "nobody",
    "everybody", "anybody", "me", "you", "us", "them", "he", "she", "it",
    "we", "they", "this", "that", "these", "those", "what", "when", "where",
    "why", "how", "who", "which", "whose", "whom", "hello world", "test123",
    "admin123", "root123", "password1", "password12", "123password",
    "iloveyou", "princess", "football", "baseball", "soccer", "hockey",
    "batman", "superman", "shadow1", "michael", "jennifer", "jordan",
    "hunter", "ranger", "buster", "charlie", "daniel", "thomas", "robert",
    "jessica", "ashley", "amanda", "nicole", "maggie", "pepper", "ginger",
    "login", "abcd", "changeme", "default", "access", "computer", "internet",
    "india", "bharat", "hacker", "starwars", "whatever", "freedom", "qazwsx",
]

KEYBOARD_PATTERNS = [
    "qwertyuiop", "asdfghjkl", "zxcvbnm", "1234567890",
    "qwerty", "asdfgh", "zxcvbn", "123456", "654321",
    "qwertyui", "asdfghjk", "zxcvbnmm", "12345678",
    "87654321", "qwertyuio", "zxcvbnm,",
    "123456789", "987654321", "poiuytrewq", "1q2w3e4r", "1qaz2wsx",
]

# words that get case, suffix and leetspeak variants
CORE_WORDS = [
    "password", "admin", "hello", "welcome", "qwerty", "letmein", "dragon",
    "monkey", "master", "secret", "test", "user", "root", "love", "sunshine",
    "football", "iloveyou", "princess", "login", "guest", "shadow", "summer",
    "winter", "freedom", "whatever", "computer", "internet", "superman",
    "batman", "starwars",
]


def apply_leet(token: str) -> str:
    return "".join(LEET_MAP.get(c, c) for c in token)


def _year_range(first=1970, last=2030):
    return range(first, last + 1)


def numeric_candidates(limit: int = 9999):
    for i in range(limit + 1):
        yield str(i)
        if i <= 9999:
            yield f"{i:04d}"
        if i <= 999:
            yield f"{i:03d}"
        if i <= 99:
            yield f"{i:02d}"


def hex_candidates(limit: int = 255):
    for i in range(limit + 1):
        yield f"{i:02x}"
        yield f"{i:02X}"


def affix_candidates(limit: int = 999):
    for word in AFFIXES:
        for i in range(limit + 1):
            yield f"{word}{i}"
            yield f"{i}{word}"


def date_candidates():
    for year in _year_range():
        for month in range(1, 13):
            yield f"{month:02d}{year}"
            yield f"{year}{month:02d}"
            yield f"{month:02d}/{year}"
            yield f"{year}-{month:02d}"


def word_variants(word: str):
    forms = [word.lower(), word.upper(), word.capitalize()]
    for form in forms:
        yield form
        for suffix in SUFFIXES:
            yield form + suffix
        yield "123" + form
    yield apply_leet(word.lower())


def build_wordlist(max_size: int = MAX_CANDIDATES) -> list:
    """
    Deterministic candidate corpus for the precomputed lookup tables.

    Sections are emitted in a fixed precedence (curated words, numbers, hex,
    affixed numbers, dates, core-word variants); duplicates keep their first
    position and the result is cut at `max_size`, so the same call always
    yields the same list.
    """
    sections = (
        COMMON_WORDS,
        KEYBOARD_PATTERNS,
        numeric_candidates(),
        hex_candidates(),
        affix_candidates(),
        date_candidates(),
        (v for w in CORE_WORDS for v in word_variants(w)),
    )
    seen = {}
    for section in sections:
        for candidate in section:
            if len(seen) >= max_size:
                break
            seen.setdefault(candidate, None)
    words = list(seen)
    logger.info("Wordlist built with %d candidates (cap %d)", len(words), max_size)
    return words
