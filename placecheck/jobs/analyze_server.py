"""HTTP entrypoint for place analysis (Cloud Run friendly)."""

from __future__ import annotations

import logging
import os
import threading
from typing import Any, Dict, Optional, Tuple

from flask import Flask, jsonify, request

from placecheck.analysis.plan import PLANS
from placecheck.core.config import ConfigError, get_settings
from placecheck.core.errors import NeedsDisambiguation, ServiceMisconfigured, UpstreamError
from placecheck.services.analyze import AnalysisServices, AnalyzeRequest, analyze, build_services

# ---------- Logging ----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

MODES = ("place_url", "biz_search")
DEPTHS = ("standard", "deep")
LANGUAGES = ("ko",)


# ---------- Validation ----------


def _text(payload: Dict[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def parse_request(payload: Any) -> Tuple[Optional[AnalyzeRequest], Dict[str, str]]:
    """Validate the request body; returns the request or field -> message errors."""

    errors: Dict[str, str] = {}
    if not isinstance(payload, dict):
        return None, {"body": "must be a JSON object"}

    input_ = payload.get("input")
    options = payload.get("options") if payload.get("options") is not None else {}
    if not isinstance(input_, dict):
        return None, {"input": "is required"}
    if not isinstance(options, dict):
        return None, {"options": "must be an object"}

    mode = input_.get("mode")
    if mode not in MODES:
        errors["input.mode"] = f"must be one of {', '.join(MODES)}"

    place_url = name = address = phone = None
    if mode == "place_url":
        place_url = _text(input_, "placeUrl")
        if not place_url:
            errors["input.placeUrl"] = "is required"
        elif not place_url.startswith(("http://", "https://")):
            errors["input.placeUrl"] = "must be an http(s) URL"
    elif mode == "biz_search":
        name = _text(input_, "name")
        address = _text(input_, "address")
        phone = _text(input_, "phone")
        if not name:
            errors["input.name"] = "is required"
        if not address:
            errors["input.address"] = "is required"
        if input_.get("phone") is not None and not isinstance(input_.get("phone"), str):
            errors["input.phone"] = "must be a string"

    plan = options.get("plan", "free")
    if plan not in PLANS:
        errors["options.plan"] = f"must be one of {', '.join(PLANS)}"
    language = options.get("language", "ko")
    if language not in LANGUAGES:
        errors["options.language"] = "must be ko"
    depth = options.get("depth", "standard")
    if depth not in DEPTHS:
        errors["options.depth"] = f"must be one of {', '.join(DEPTHS)}"
    debug = options.get("debug", False)
    if not isinstance(debug, bool):
        errors["options.debug"] = "must be a boolean"

    if errors:
        return None, errors
    return (
        AnalyzeRequest(
            mode=mode,
            place_url=place_url,
            name=name,
            address=address,
            phone=phone,
            plan=plan,
            language=language,
            depth=depth,
            debug=debug,
        ),
        {},
    )


# ---------- App ----------


def create_app(services: Optional[AnalysisServices] = None) -> Flask:
    app = Flask(__name__)
    app.json.ensure_ascii = False
    state: Dict[str, AnalysisServices] = {}
    lock = threading.Lock()
    if services is not None:
        state["services"] = services

    def _services() -> AnalysisServices:
        with lock:
            if "services" not in state:
                state["services"] = build_services()
        return state["services"]

    @app.get("/")
    def root() -> Any:
        """Simple root to avoid 404 on GET /"""
        return "ok", 200

    @app.get("/healthz")
    def healthcheck() -> Any:
        settings = get_settings()
        return (
            jsonify(
                {
                    "status": "ok",
                    "documentClient": settings.document_client,
                    "localSearchConfigured": settings.local_search_configured,
                    "keywordVolumeConfigured": settings.keyword_volume_configured,
                    "revision": os.getenv("K_REVISION", "unknown"),
                }
            ),
            200,
        )

    @app.post("/api/analyze")
    def analyze_place() -> Any:
        payload = request.get_json(silent=True)
        parsed, errors = parse_request(payload)
        if parsed is None:
            return jsonify({"error": "INVALID_REQUEST", "details": errors}), 400

        try:
            body = analyze(parsed, _services())
        except NeedsDisambiguation as exc:
            return jsonify({"error": "NEEDS_DISAMBIGUATION", "message": str(exc), "candidates": exc.candidates}), 422
        except (ServiceMisconfigured, ConfigError) as exc:
            logger.error("Service misconfigured: %s", exc)
            return jsonify({"error": "SERVICE_MISCONFIGURED", "message": str(exc)}), 503
        except UpstreamError as exc:
            logger.warning("Upstream failure: %s", exc)
            return jsonify({"error": "ANALYZE_FAILED", "message": str(exc)}), 500
        except Exception as exc:  # noqa: BLE001
            logger.exception("Analysis failed: %s", exc)
            return jsonify({"error": "ANALYZE_FAILED", "message": str(exc)}), 500

        return jsonify(body), 200

    return app


app = create_app()


def main() -> None:
    port = get_settings().port
    logger.info("[BOOT] Binding on 0.0.0.0:%d", port)
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
