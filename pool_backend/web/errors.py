import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

from pool_backend.errors import ApiError

log = logging.getLogger("errors")


def register_error_handlers(app) -> None:
    @app.errorhandler(ApiError)
    def handle_api_error(e: ApiError):
        if e.status_code >= 500:
            log.error(f"{type(e).__name__}: {e.message}")
        return jsonify({"success": False, "error": e.message}), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        if e.code == 404:
            return jsonify({"success": False, "error": "Endpoint not found"}), 404
        return jsonify({"success": False, "error": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e: Exception):
        log.error("Unhandled error while processing request", exc_info=e)
        return jsonify({"success": False, "error": "Internal server error"}), 500
