# app.py
import os
import time
import json
import logging
import sqlite3
from functools import wraps
from flask import (
    Flask, current_app, request, jsonify, render_template_string
)

from hashvault.detector import detect, validate_hash
from hashvault.digests import (
    DEFAULT_BCRYPT_ROUNDS, HMAC_ALGORITHMS,
    compare_hashes, generate_file_hashes, generate_hashes, hmac_hex
)
from hashvault.lookup_engine import HashLookupEngine
from hashvault.wordlist_gen import MAX_CANDIDATES

logger = logging.getLogger(__name__)

ENGINE_KEY = "hash_lookup_engine"
RATE_KEY = "rate_limit_state"


def _env_flag(name, default=True):
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() not in ("0", "false", "no", "off", "")


def default_config():
    return {
        "HISTORY_DB": os.environ.get("HISTORY_DB", "history.db"),
        "API_KEY": os.environ.get("API_KEY"),  # if set, protects mutating endpoints
        "RATE_LIMIT_ENABLED": _env_flag("RATE_LIMIT_ENABLED"),
        "WORDLIST_MAX": int(os.environ.get("WORDLIST_MAX", MAX_CANDIDATES)),
        "BCRYPT_ROUNDS": int(os.environ.get("BCRYPT_ROUNDS", DEFAULT_BCRYPT_ROUNDS)),
        "MAX_UPLOAD_BYTES": int(os.environ.get("MAX_UPLOAD_BYTES", 5 * 1024 * 1024)),
    }


# ==== DB helpers ====
def db(path=None):
    conn = sqlite3.connect(path or current_app.config["HISTORY_DB"])
    conn.row_factory = sqlite3.Row
    return conn


def init_db(path):
    conn = db(path)
    cur = conn.cursor()
    cur.execute("""
      CREATE TABLE IF NOT EXISTS events(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        time TEXT, ip TEXT, action TEXT, detail TEXT
      )
    """)
    cur.execute("""
      CREATE TABLE IF NOT EXISTS operations(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        created_at TEXT,
        input_text TEXT, file_name TEXT, file_size TEXT,
        hash_results TEXT
      )
    """)
    cur.execute("""
      CREATE TABLE IF NOT EXISTS lookups(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        created_at TEXT,
        hash TEXT, hash_type TEXT,
        original_value TEXT, found INTEGER
      )
    """)
    conn.commit()
    conn.close()


def _now():
    return time.strftime("%Y-%m-%d %H:%M:%S")


def log(action, detail=""):
    conn = db()
    conn.execute(
        "INSERT INTO events(time, ip, action, detail) VALUES (?,?,?,?)",
        (_now(), request.remote_addr, action, detail)
    )
    conn.commit()
    conn.close()


def record_operation(hash_results, input_text=None, file_name=None, file_size=None):
    conn = db()
    cur = conn.execute(
        "INSERT INTO operations(created_at,input_text,file_name,file_size,hash_results) VALUES(?,?,?,?,?)",
        (_now(), input_text, file_name, file_size, json.dumps(hash_results))
    )
    conn.commit()
    op_id = cur.lastrowid
    conn.close()
    return op_id


def record_lookup(hash_value, hash_type, original_value, found):
    conn = db()
    cur = conn.execute(
        "INSERT INTO lookups(created_at,hash,hash_type,original_value,found) VALUES(?,?,?,?,?)",
        (_now(), hash_value, hash_type, original_value, 1 if found else 0)
    )
    conn.commit()
    lookup_id = cur.lastrowid
    conn.close()
    return lookup_id


def _operation_json(row):
    return {
        "id": row["id"],
        "inputText": row["input_text"],
        "fileName": row["file_name"],
        "fileSize": row["file_size"],
        "hashResults": json.loads(row["hash_results"]) if row["hash_results"] else None,
        "timestamp": row["created_at"],
    }


def _lookup_json(row):
    return {
        "id": row["id"],
        "hash": row["hash"],
        "hashType": row["hash_type"],
        "originalValue": row["original_value"],
        "found": bool(row["found"]),
        "timestamp": row["created_at"],
    }


# ==== Security: API key + simple rate-limit ====
def require_api_key(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        api_key = current_app.config.get("API_KEY")
        if api_key:
            supplied = request.headers.get("X-API-Key") or request.args.get("api_key")
            if supplied != api_key:
                return jsonify({"error": "Unauthorized"}), 401
        return fn(*args, **kwargs)
    return wrapper


def rate_limit(name, limit=20, per_sec=60):
    def deco(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not current_app.config.get("RATE_LIMIT_ENABLED"):
                return fn(*args, **kwargs)
            state = current_app.extensions[RATE_KEY]
            ip = request.remote_addr or "?"
            now = time.time()
            key = (ip, name)
            timestamps = [t for t in state.get(key, []) if now - t < per_sec]
            if len(timestamps) >= limit:
                logger.warning("Rate limit hit: %s from %s", name, ip)
                return jsonify({"error": f"Rate limit exceeded for {name}"}), 429
            timestamps.append(now)
            state[key] = timestamps
            return fn(*args, **kwargs)
        return wrapper
    return deco


def require_json_object(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        data = request.get_json(silent=True)
        if data is not None and not isinstance(data, dict):
            return jsonify({"error": "Request body must be a JSON object"}), 400
        return fn(*args, **kwargs)
    return wrapper


def get_engine() -> HashLookupEngine:
    return current_app.extensions[ENGINE_KEY]


def _string_list(value):
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


HOME_TMPL = """
<!doctype html>
<html lang="en">
<head><meta charset="utf-8"><title>Hash Utility</title></head>
<body>
  <h1>Hash Utility</h1>
  <p>{{ candidates }} precomputed candidates per algorithm.</p>
  <table>
    <tr><th>Algorithm</th><th>Precomputed</th><th>Learned</th></tr>
    {% for algo, s in stats.items() %}
    <tr><td>{{ algo }}</td><td>{{ s.static }}</td><td>{{ s.dynamic }}</td></tr>
    {% endfor %}
  </table>
</body>
</html>
"""


def create_app(config=None, engine=None):
    """
    Application factory. The lookup engine is built here (or passed in) and
    owned by the returned app for its whole lifetime.
    """
    app = Flask(__name__)
    app.config.update(default_config())
    if config:
        app.config.update(config)
    # leave room for multipart overhead; the upload route enforces the real limit
    app.config["MAX_CONTENT_LENGTH"] = app.config["MAX_UPLOAD_BYTES"] + 64 * 1024

    init_db(app.config["HISTORY_DB"])
    if engine is None:
        engine = HashLookupEngine.build(app.config["WORDLIST_MAX"])
    app.extensions[ENGINE_KEY] = engine
    app.extensions[RATE_KEY] = {}

    _register_routes(app)
    return app


def _register_routes(app):
    @app.route("/")
    def home():
        engine = get_engine()
        return render_template_string(HOME_TMPL, stats=engine.stats(), candidates=engine.candidate_count)

    # ---------- Generation ----------
    @app.route("/api/hash/generate", methods=["POST"])
    @require_api_key
    @rate_limit("generate", limit=60, per_sec=60)
    @require_json_object
    def api_generate():
        data = request.get_json(silent=True) or {}
        input_text = data.get("inputText")
        hash_types = data.get("hashTypes")
        if not input_text or not isinstance(input_text, str) or not _string_list(hash_types):
            return jsonify({"error": "Invalid input"}), 400
        try:
            results = generate_hashes(input_text, hash_types, current_app.config["BCRYPT_ROUNDS"])
            learned = get_engine().learn_results(results, input_text)
            op_id = record_operation(results, input_text=input_text)
        except Exception as e:
            logger.exception("Hash generation failed")
            return jsonify({"error": f"Failed to generate hashes: {e}"}), 500
        log("Generate Hash", f"types={','.join(results)}, learned={learned}")
        return jsonify({"hashResults": results, "operationId": op_id})

    @app.route("/api/hash/generate-file", methods=["POST"])
    @require_api_key
    @rate_limit("generate_file", limit=20, per_sec=60)
    def api_generate_file():
        f = request.files.get("file")
        raw_types = request.form.get("hashTypes")
        if f is None or not raw_types:
            return jsonify({"error": "File and hash types required"}), 400
        try:
            hash_types = json.loads(raw_types)
        except ValueError:
            return jsonify({"error": "hashTypes must be a JSON array"}), 400
        if not _string_list(hash_types):
            return jsonify({"error": "hashTypes must be a JSON array"}), 400

        f.seek(0, os.SEEK_END)
        size = f.tell()
        f.seek(0)
        max_bytes = current_app.config["MAX_UPLOAD_BYTES"]
        if size > max_bytes:
            log("Generate File Hash (rejected)", f"too large: {size} bytes")
            return jsonify({"error": f"File too large (max {max_bytes} bytes)"}), 400

        try:
            results = generate_file_hashes(f.read(), hash_types)
            # learned against the file name, not its content
            learned = get_engine().learn_results(results, f.filename)
            op_id = record_operation(results, file_name=f.filename, file_size=str(size))
        except Exception as e:
            logger.exception("File hash generation failed")
            return jsonify({"error": f"Failed to generate file hashes: {e}"}), 500
        log("Generate File Hash", f"{f.filename} ({size} bytes), learned={learned}")
        return jsonify({"hashResults": results, "operationId": op_id})

    @app.route("/api/hash/batch", methods=["POST"])
    @require_api_key
    @rate_limit("batch", limit=20, per_sec=60)
    @require_json_object
    def api_batch_generate():
        data = request.get_json(silent=True) or {}
        inputs = data.get("inputs")
        hash_types = data.get("hashTypes")
        if not _string_list(inputs) or not _string_list(hash_types):
            return jsonify({"error": "Invalid inputs or hash types"}), 400

        engine = get_engine()
        out = []
        try:
            for text in inputs:
                results = generate_hashes(text, hash_types, current_app.config["BCRYPT_ROUNDS"])
                engine.learn_results(results, text)
                op_id = record_operation(results, input_text=text)
                out.append({"input": text, "hashes": results, "operationId": op_id})
        except Exception as e:
            logger.exception("Batch hash generation failed")
            return jsonify({"error": f"Failed to generate batch hashes: {e}"}), 500
        log("Batch Generate", f"{len(out)} input(s)")
        return jsonify({"results": out})

    @app.route("/api/hash/hmac", methods=["POST"])
    @rate_limit("hmac", limit=60, per_sec=60)
    @require_json_object
    def api_hmac():
        data = request.get_json(silent=True) or {}
        message = data.get("message")
        key = data.get("key")
        algo = data.get("algorithm") or "sha256"
        if not message or not key or not isinstance(message, str) or not isinstance(key, str):
            return jsonify({"error": "Message and key are required"}), 400
        if not isinstance(algo, str):
            return jsonify({"error": "algorithm must be a string"}), 400
        algo = algo.lower()
        if algo not in HMAC_ALGORITHMS:
            return jsonify({"error": f"Unsupported algorithm: {algo}"}), 400
        digest = hmac_hex(message, key, algo)
        log("HMAC", f"algo={algo}, key_len={len(key)}")
        return jsonify({"hmac": digest, "algorithm": algo, "message": message, "keyLength": len(key)})

    # ---------- Lookup ----------
    @app.route("/api/hash/lookup", methods=["POST"])
    @rate_limit("lookup", limit=120, per_sec=60)
    @require_json_object
    def api_lookup():
        data = request.get_json(silent=True) or {}
        hash_value = data.get("hash")
        hash_type = data.get("hashType") or "auto-detect"
        if not hash_value or not isinstance(hash_value, str):
            return jsonify({"error": "Hash required"}), 400
        if not isinstance(hash_type, str):
            return jsonify({"error": "hashType must be a string"}), 400
        try:
            hit = get_engine().lookup_one(hash_value, hash_type)
            original = hit.plaintext if hit else None
            lookup_id = record_lookup(hash_value, hash_type, original, hit is not None)
        except Exception as e:
            logger.exception("Hash lookup failed")
            return jsonify({"error": f"Failed to lookup hash: {e}"}), 500
        log("Lookup", f"found={hit is not None}")
        return jsonify({
            "found": hit is not None,
            "originalValue": original,
            "hashType": hit.algorithm if hit else detect(hash_value.strip().lower()),
            "lookupId": lookup_id,
        })

    @app.route("/api/hash/batch-lookup", methods=["POST"])
    @rate_limit("batch_lookup", limit=30, per_sec=60)
    @require_json_object
    def api_batch_lookup():
        data = request.get_json(silent=True) or {}
        hashes = data.get("hashes")
        if not isinstance(hashes, list):
            return jsonify({"error": "hashes must be a list"}), 400
        results = get_engine().lookup_batch(hashes)
        found = sum(1 for r in results if r.found)
        log("Batch Lookup", f"{found}/{len(results)} found, {len(hashes)} submitted")
        return jsonify({"results": [r.to_json() for r in results]})

    @app.route("/api/rainbow/stats")
    def api_rainbow_stats():
        return jsonify(get_engine().stats())

    # ---------- Validation / comparison ----------
    @app.route("/api/hash/compare", methods=["POST"])
    @require_json_object
    def api_compare():
        data = request.get_json(silent=True) or {}
        h1, h2 = data.get("hash1"), data.get("hash2")
        if not h1 or not h2 or not isinstance(h1, str) or not isinstance(h2, str):
            return jsonify({"error": "Both hashes required"}), 400
        return jsonify({"match": compare_hashes(h1, h2)})

    @app.route("/api/hash/validate", methods=["POST"])
    @require_json_object
    def api_validate():
        data = request.get_json(silent=True) or {}
        hash_value = data.get("hash")
        if not hash_value or not isinstance(hash_value, str):
            return jsonify({"error": "Hash is required"}), 400
        hash_type = data.get("type")
        if hash_type is not None and not isinstance(hash_type, str):
            return jsonify({"error": "type must be a string"}), 400
        return jsonify(validate_hash(hash_value, hash_type))

    # ---------- History ----------
    @app.route("/api/hash/history")
    def api_hash_history():
        conn = db()
        ops = conn.execute("SELECT * FROM operations ORDER BY id DESC").fetchall()
        lookups = conn.execute("SELECT * FROM lookups ORDER BY id DESC").fetchall()
        conn.close()
        return jsonify({
            "operations": [_operation_json(r) for r in ops],
            "lookups": [_lookup_json(r) for r in lookups],
            "stats": {
                "totalOperations": len(ops),
                "totalLookups": len(lookups),
                "successfulLookups": sum(1 for r in lookups if r["found"]),
            },
        })

    @app.route("/api/history")
    def api_history():
        conn = db()
        rows = conn.execute("SELECT time, action, detail FROM events ORDER BY id DESC LIMIT 200").fetchall()
        conn.close()
        return jsonify([dict(r) for r in rows])

    @app.route("/api/history/clear", methods=["POST"])
    @require_api_key
    def api_clear_history():
        conn = db()
        conn.execute("DELETE FROM events")
        conn.commit()
        conn.close()
        log("History Cleared")
        return jsonify({"status": "cleared"})

    @app.route("/api/health")
    def api_health():
        return jsonify({"ok": True, "t": time.time()})


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s'
    )
    create_app().run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)), debug=True)
