import threading

import pytest

from hashvault.digests import PLAIN_ALGORITHMS, hash_word
from hashvault.lookup_engine import HashLookupEngine, LookupHit
from hashvault.lookup_tables import build_table
from hashvault.wordlist_gen import build_wordlist

HELLO_MD5 = "5d41402abc4b2a76b9719d911017c592"
EMPTY_MD5 = "d41d8cd98f00b204e9800998ecf8427e"


@pytest.mark.parametrize("algorithm", PLAIN_ALGORITHMS)
def test_every_candidate_reverses(full_engine, algorithm):
    for word in build_wordlist():
        hit = full_engine.lookup_one(hash_word(word, algorithm))
        assert hit == LookupHit(algorithm, word), word


def test_hello_md5(small_engine):
    assert small_engine.lookup_one(HELLO_MD5) == LookupHit("md5", "hello")


def test_lookup_normalises_input(small_engine):
    assert small_engine.lookup_one("  " + HELLO_MD5.upper() + "\n") == LookupHit("md5", "hello")


def test_empty_string_digest_is_found(small_engine):
    assert small_engine.lookup_one(EMPTY_MD5) == LookupHit("md5", "")


def test_miss_returns_none(small_engine):
    assert small_engine.lookup_one(hash_word("definitely not precomputed", "sha1")) is None
    assert small_engine.lookup_one("notahash") is None


def test_bcrypt_is_never_found(small_engine):
    assert small_engine.lookup_one("$2a$10$N9qo8uLOickgx2ZMRZoMye.jKbQK1CfSrFoqo4C2i3OoVmPqWDlSS") is None


def test_learn_then_lookup(small_engine):
    secret = "correct horse battery staple"
    for algo in PLAIN_ALGORITHMS:
        digest = hash_word(secret, algo)
        assert small_engine.lookup_one(digest) is None
        small_engine.learn(algo, digest, secret)
        assert small_engine.lookup_one(digest) == LookupHit(algo, secret)


def test_learn_keeps_first_plaintext(small_engine):
    digest = hash_word("one", "sha512")
    small_engine.learn("sha512", digest, "one")
    small_engine.learn("sha512", digest, "two")
    assert small_engine.lookup_one(digest).plaintext == "one"


def test_dynamic_cache_checked_before_static(small_engine):
    # a learned mapping shadows the precomputed one for the same digest
    small_engine.learn("md5", HELLO_MD5, "report.txt")
    assert small_engine.lookup_one(HELLO_MD5) == LookupHit("md5", "report.txt")


def test_learn_results(small_engine):
    results = {"md5": hash_word("zebra!", "md5"), "bcrypt": "$2b$04$xyz", "crc32": "00"}
    assert small_engine.learn_results(results, "zebra!") == 1
    assert small_engine.lookup_one(results["md5"]) == LookupHit("md5", "zebra!")


def test_requested_hash_type_does_not_override_detection(small_engine):
    # length decides the algorithm whatever type the caller picked
    assert small_engine.lookup_one(HELLO_MD5, "sha1") == LookupHit("md5", "hello")
    assert small_engine.lookup_one(HELLO_MD5, "sha512") == LookupHit("md5", "hello")
    assert small_engine.lookup_one(HELLO_MD5, "auto-detect") == LookupHit("md5", "hello")
    assert small_engine.lookup_one(HELLO_MD5, "unknown") == LookupHit("md5", "hello")
    assert small_engine.lookup_one(HELLO_MD5, 5) == LookupHit("md5", "hello")


def test_unknown_type_scans_dynamic_then_static_in_order():
    engine = HashLookupEngine({algo: build_table(algo, []) for algo in PLAIN_ALGORITHMS})
    engine._static["sha256"] = build_table("md5", ["static-value"])
    digest = hash_word("static-value", "md5")
    # static hit found under the table that holds it
    assert engine.lookup_one(digest, "unknown") == LookupHit("sha256", "static-value")
    # any dynamic hit beats the static scan
    engine.learn("sha512", digest, "dynamic-value")
    assert engine.lookup_one(digest, "unknown") == LookupHit("sha512", "dynamic-value")
    engine.learn("sha1", digest, "earlier")
    assert engine.lookup_one(digest, "unknown") == LookupHit("sha1", "earlier")


def test_unknown_shape_digest_scans_all_tables():
    engine = HashLookupEngine({"md5": build_table("md5", [])})
    engine.learn("md5", "short", "weird")
    assert engine.lookup_one("SHORT") == LookupHit("md5", "weird")


def test_batch_lookup(small_engine):
    results = small_engine.lookup_batch([HELLO_MD5, "notahash"])
    assert len(results) == 2
    assert results[0].found and results[0].original_value == "hello"
    assert results[0].hash_type == "md5"
    assert not results[1].found
    assert results[1].hash_type == "unknown"
    assert results[1].original_value is None


def test_batch_lookup_skips_empty_and_non_strings(small_engine):
    results = small_engine.lookup_batch(["", None, 42, "   ", EMPTY_MD5, HELLO_MD5.upper()])
    assert [r.hash for r in results] == [EMPTY_MD5, HELLO_MD5.upper()]
    assert results[0].found and results[0].original_value == ""


def test_batch_result_json(small_engine):
    (res,) = small_engine.lookup_batch([hash_word("nope-nope", "sha1")])
    assert res.to_json() == {
        "hash": hash_word("nope-nope", "sha1"),
        "hashType": "sha1",
        "found": False,
        "originalValue": None,
    }


def test_stats(small_engine):
    stats = small_engine.stats()
    assert list(stats) == list(PLAIN_ALGORITHMS)
    assert all(s["static"] == small_engine.candidate_count for s in stats.values())
    assert all(s["dynamic"] == 0 for s in stats.values())
    small_engine.learn("md5", hash_word("new", "md5"), "new")
    assert small_engine.stats()["md5"]["dynamic"] == 1


def test_concurrent_learn_and_lookup_see_whole_entries():
    engine = HashLookupEngine({algo: build_table(algo, []) for algo in PLAIN_ALGORITHMS})
    words = [f"word-{i}" for i in range(300)]
    digests = [hash_word(w, "sha256") for w in words]
    start = threading.Event()
    bad = []

    def writer():
        start.wait()
        for digest, word in zip(digests, words):
            engine.learn("sha256", digest, word)

    def reader():
        start.wait()
        for _ in range(3):
            for digest, word in zip(digests, words):
                hit = engine.lookup_one(digest)
                if hit is not None and hit != LookupHit("sha256", word):
                    bad.append(hit)

    threads = [threading.Thread(target=writer)] + [threading.Thread(target=reader) for _ in range(4)]
    for t in threads:
        t.start()
    start.set()
    for t in threads:
        t.join()

    assert bad == []
    assert all(engine.lookup_one(d) == LookupHit("sha256", w) for d, w in zip(digests, words))
