"""HTTP entrypoint serving the map dataset (Cloud Run friendly)."""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from flask import Flask, Response, jsonify, request

from roteiro.core.cache import TTLCache
from roteiro.core.config import ConfigError, get_settings, require_settings
from roteiro.etl.rows import MissingColumnsError
from roteiro.jobs.build_dataset import build_dataset
from roteiro.vendors.google_sheets import GoogleSheetsError

# ---------- Logging ----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ---------- App & response cache ----------
app = Flask(__name__)
CACHE_KEY = "sheets-data"
_response_cache = TTLCache(get_settings().data_cache_seconds, name="response_cache")

_REFRESH_VALUES = {"1", "true", "yes"}

# ---------- Routes ----------


@app.get("/")
def root() -> Any:
    """Simple root to avoid 404 on GET /"""
    return "ok", 200


@app.get("/healthz")
def healthcheck() -> Any:
    """Lightweight health endpoint; does not touch the Google APIs."""
    settings = get_settings()
    return (
        jsonify(
            {
                "status": "ok",
                "sheet_configured": bool(settings.sheet_id),
                "cached": _response_cache.get(CACHE_KEY) is not None,
                "revision": os.getenv("K_REVISION", "unknown"),
            }
        ),
        200,
    )


@app.get("/api/data")
def dataset() -> Any:
    """Return the places dataset, served from the short-lived snapshot when possible.

    Pass ``?refresh=1`` to rebuild regardless of the cached snapshot.
    """
    force = request.args.get("refresh", "").lower() in _REFRESH_VALUES
    snapshot = None if force else _response_cache.get(CACHE_KEY)

    if snapshot is None:
        try:
            result = build_dataset(require_settings())
        except ConfigError as exc:
            logger.error("Configuration error: %s", exc)
            return jsonify({"error": str(exc)}), 500
        except (GoogleSheetsError, MissingColumnsError) as exc:
            logger.error("Failed to build dataset: %s", exc)
            return jsonify({"error": str(exc)}), 502
        snapshot = json.dumps(result.to_dict(), ensure_ascii=False)
        _response_cache.set(CACHE_KEY, snapshot)
        logger.info("Rebuilt dataset: places=%d errors=%d", len(result.places), len(result.errors))

    return Response(snapshot, status=200, mimetype="application/json")


def main() -> None:
    """Bind on the PORT injected by Cloud Run, falling back to WORKER_PORT locally."""
    env_port = os.getenv("PORT")
    port = int(env_port or get_settings().worker_port)
    logger.info("[BOOT] Binding on 0.0.0.0:%d", port)
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
