"""latex-infix microservice: HTTP handler for LaTeX-to-infix translation.

Provides /translate, /translate/batch, /health, /status, /functions endpoints
using stdlib http.server.

Usage:
    python -m latex_infix.main

Environment:
    LATEX_INFIX_PORT=8770          # HTTP listen port
    LATEX_INFIX_MODE=strict        # Default error mode (strict | lenient)
    LATEX_INFIX_MAX_LENGTH=2000    # Longest accepted LaTeX input
    LATEX_INFIX_LOG_LEVEL=INFO     # Logging level
"""

from __future__ import annotations

import json
import logging
import signal
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any

from latex_infix import config
from latex_infix.errors import EvaluationError, TranslationError
from latex_infix.evaluator import evaluate
from latex_infix.translator import Translator
from latex_infix.vocabulary import DEFAULT_TABLE

logger = logging.getLogger(__name__)

VERSION = "0.1.0"

TRANSLATORS = {
    "strict": Translator(DEFAULT_TABLE, lenient=False),
    "lenient": Translator(DEFAULT_TABLE, lenient=True),
}

_start_time: float = 0.0

# Thread pool for batch translation
_batch_pool: ThreadPoolExecutor | None = None


class JsonFormatter(logging.Formatter):
    """JSON log formatter for Loki/journald."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "service": "latex-infix",
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


class TranslateHandler(BaseHTTPRequestHandler):
    """HTTP handler for the translation service."""

    def do_POST(self) -> None:
        if self.path == "/translate":
            self._handle_translate()
        elif self.path == "/translate/batch":
            self._handle_batch()
        else:
            self._send_error("Not found", "NOT_FOUND", 404)

    def do_GET(self) -> None:
        if self.path == "/health":
            self._handle_health()
        elif self.path == "/status":
            self._handle_status()
        elif self.path == "/functions":
            self._handle_functions()
        else:
            self._send_error("Not found", "NOT_FOUND", 404)

    def _handle_translate(self) -> None:
        data = self._read_json()
        if data is None:
            return

        latex = data.get("latex")
        if not isinstance(latex, str) or not latex:
            self._send_error("latex field is required", "INVALID_REQUEST", 400)
            return
        if not self._check_length(latex):
            return

        bindings = data.get("bindings")
        if bindings is not None and not _valid_bindings(bindings):
            self._send_error(
                "bindings must map names to numbers", "INVALID_REQUEST", 400,
            )
            return

        mode = _resolve_mode(data)
        if mode is None:
            self._send_error("lenient must be a boolean", "INVALID_REQUEST", 400)
            return

        start = time.time()
        try:
            result = TRANSLATORS[mode].translate(latex)
        except TranslationError as exc:
            logger.info(
                "translate latex=%s success=False kind=%s time_ms=%d",
                latex[:50], exc.kind.value, int((time.time() - start) * 1000),
            )
            self._send_error(exc.message, exc.code, 422, exc.to_dict())
            return

        response: dict[str, Any] = {"result": result, "mode": mode}
        if bindings is not None:
            try:
                response["value"] = evaluate(result, bindings)
            except EvaluationError as exc:
                self._send_error(
                    str(exc), "EVALUATION_ERROR", 422, {"result": result},
                )
                return

        elapsed = int((time.time() - start) * 1000)
        logger.info(
            "translate latex=%s success=True mode=%s time_ms=%d",
            latex[:50], mode, elapsed,
        )
        response["time_ms"] = elapsed
        self._send_json(response)

    def _handle_batch(self) -> None:
        data = self._read_json()
        if data is None:
            return

        items = data.get("items")
        if not isinstance(items, list) or not all(
            isinstance(item, str) for item in items
        ):
            self._send_error(
                "items must be a list of strings", "INVALID_REQUEST", 400,
            )
            return
        for item in items:
            if not self._check_length(item):
                return

        mode = _resolve_mode(data)
        if mode is None:
            self._send_error("lenient must be a boolean", "INVALID_REQUEST", 400)
            return

        start = time.time()
        results = _translate_parallel(items, mode)
        elapsed = int((time.time() - start) * 1000)

        successes = sum(1 for r in results if r["success"])
        logger.info(
            "batch items=%d success=%d mode=%s time_ms=%d",
            len(results), successes, mode, elapsed,
        )
        self._send_json({"results": results, "mode": mode, "time_ms": elapsed})

    def _handle_health(self) -> None:
        self._send_json({
            "status": "ok",
            "service": "latex-infix",
            "uptime_seconds": round(time.time() - _start_time, 1),
        })

    def _handle_status(self) -> None:
        self._send_json({
            "service": "latex-infix",
            "version": VERSION,
            "uptime_seconds": round(time.time() - _start_time, 1),
            "default_mode": config.get_mode(),
            "max_length": config.get_max_length(),
        })

    def _handle_functions(self) -> None:
        self._send_json({
            "functions": list(DEFAULT_TABLE.functions),
            "constants": list(DEFAULT_TABLE.constants),
        })

    def _check_length(self, latex: str) -> bool:
        limit = config.get_max_length()
        if len(latex) > limit:
            self._send_error(
                f"Input longer than {limit} characters",
                "INPUT_TOO_LONG", 413, {"length": len(latex), "limit": limit},
            )
            return False
        return True

    def _send_json(self, data: dict, status: int = 200) -> None:
        body = json.dumps(data, default=str).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _send_error(self, error: str, code: str, status: int = 400,
                    details: dict | None = None) -> None:
        response: dict[str, Any] = {"error": error, "code": code}
        if details:
            response["details"] = details
        self._send_json(response, status)

    def _read_json(self) -> dict | None:
        content_length = int(self.headers.get("Content-Length", 0))
        if content_length == 0:
            self._send_error("Request body is empty", "INVALID_JSON", 400)
            return None
        try:
            body = self.rfile.read(content_length)
            data = json.loads(body)
        except (json.JSONDecodeError, ValueError) as e:
            self._send_error(f"Invalid JSON: {e}", "INVALID_JSON", 400)
            return None
        if not isinstance(data, dict):
            self._send_error("Request body must be an object", "INVALID_JSON", 400)
            return None
        return data

    def log_message(self, format: str, *args: Any) -> None:
        logger.info("%s %s", self.client_address[0], format % args)


def _resolve_mode(data: dict) -> str | None:
    """Request ``lenient`` flag, falling back to LATEX_INFIX_MODE."""
    lenient = data.get("lenient")
    if lenient is None:
        return config.get_mode()
    if not isinstance(lenient, bool):
        return None
    return "lenient" if lenient else "strict"


def _valid_bindings(bindings: Any) -> bool:
    if not isinstance(bindings, dict):
        return False
    return all(
        isinstance(value, (int, float)) and not isinstance(value, bool)
        for value in bindings.values()
    )


def _translate_one(latex: str, mode: str) -> dict[str, Any]:
    """Translate a single batch item, reporting failures in the result."""
    try:
        result = TRANSLATORS[mode].translate(latex)
    except TranslationError as exc:
        return {
            "latex": latex,
            "success": False,
            "result": None,
            "error": exc.message,
            "code": exc.code,
            "details": exc.to_dict(),
        }
    return {"latex": latex, "success": True, "result": result}


def _translate_parallel(items: list[str], mode: str) -> list[dict[str, Any]]:
    """Translate batch items in parallel.

    Results are returned in the same order as items.
    """
    if len(items) <= 1 or _batch_pool is None:
        return [_translate_one(item, mode) for item in items]

    future_to_index = {
        _batch_pool.submit(_translate_one, item, mode): index
        for index, item in enumerate(items)
    }

    # Collect results preserving original order
    result_map: dict[int, dict[str, Any]] = {}
    for future in as_completed(future_to_index):
        index = future_to_index[future]
        try:
            result_map[index] = future.result()
        except Exception as exc:
            logger.exception("Batch item %d raised exception", index)
            result_map[index] = {
                "latex": items[index],
                "success": False,
                "result": None,
                "error": str(exc),
                "code": "INTERNAL_ERROR",
            }

    return [result_map[index] for index in range(len(items))]


def _init_pool(max_workers: int = 4) -> None:
    global _batch_pool
    _batch_pool = ThreadPoolExecutor(
        max_workers=max_workers, thread_name_prefix="latex-infix-batch",
    )


def main() -> None:
    """Start the latex-infix microservice."""
    global _start_time

    root = logging.getLogger()
    root.setLevel(config.get_log_level())
    root.handlers.clear()
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)

    _init_pool()

    port = config.get_port()
    _start_time = time.time()

    server = HTTPServer(("0.0.0.0", port), TranslateHandler)

    if threading.current_thread() is threading.main_thread():
        def sigterm_handler(signum: int, frame: Any) -> None:
            logger.info("SIGTERM received, shutting down...")
            server.shutdown()
        signal.signal(signal.SIGTERM, sigterm_handler)

    logger.info(
        "latex-infix service starting on port %d (mode=%s)",
        port, config.get_mode(),
    )

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        if _batch_pool:
            _batch_pool.shutdown(wait=False)
        server.server_close()
        logger.info("latex-infix service stopped")


if __name__ == "__main__":
    main()
