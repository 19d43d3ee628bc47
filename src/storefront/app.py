import logging
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, jsonify
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from storefront.core.config import Config
from storefront.core.dependencies import build_container, get_config
from storefront.core.exceptions import BaseAPIException
from storefront.db import create_db_engine, ping
from storefront.routes.cart import cart_bp
from storefront.schemas.common_schemas import ErrorResponse

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )


def _error(code: str, message: str, status: int):
    body = ErrorResponse(error={"code": code, "message": message})
    return jsonify(body.model_dump(mode="json")), status


def create_app(config: Optional[Config] = None, engine: Optional[Engine] = None) -> Flask:
    """
    Application factory.

    Tests pass their own config and engine; each call gets an isolated
    Flask instance with its own dependency container.
    """
    config = config or get_config()
    config.validate()
    _configure_logging(config.app.log_level)

    engine = engine or create_db_engine(config.database)

    app = Flask(__name__)
    app.config["DEBUG"] = config.app.debug
    app.extensions["storefront"] = build_container(config, engine)

    # ------------------------------------------------------------------ #
    # Blueprints                                                           #
    # ------------------------------------------------------------------ #
    app.register_blueprint(cart_bp, url_prefix=f"/api/{config.api.version}/cart")

    # ------------------------------------------------------------------ #
    # Error handlers: consistent JSON error envelope                      #
    # ------------------------------------------------------------------ #
    @app.errorhandler(BaseAPIException)
    def api_error(e: BaseAPIException):
        if e.status_code >= 500:
            logger.error(f"{e.error_code}: {e.internal_message}")
        else:
            logger.info(f"{e.error_code}: {e.message}")
        body = e.to_dict()
        body["timestamp"] = datetime.now(timezone.utc).isoformat()
        return jsonify(body), e.status_code

    @app.errorhandler(400)
    def bad_request(e):
        logger.warning(f"Bad request: {e.description}")
        return _error("BAD_REQUEST", str(e.description), 400)

    @app.errorhandler(401)
    def unauthorized(e):
        return _error("UNAUTHORIZED", str(e.description), 401)

    @app.errorhandler(404)
    def not_found(e):
        return _error("NOT_FOUND", str(e.description), 404)

    @app.errorhandler(405)
    def method_not_allowed(e):
        return _error("METHOD_NOT_ALLOWED", str(e.description), 405)

    @app.errorhandler(SQLAlchemyError)
    def db_error(e):
        logger.error(f"Database error: {e}")
        return _error("DATABASE_ERROR", "A database error occurred.", 500)

    @app.errorhandler(500)
    def internal_error(e):
        logger.error(f"Internal error: {e}")
        return _error("INTERNAL_ERROR", "An internal server error occurred.", 500)

    # ------------------------------------------------------------------ #
    # Health check                                                         #
    # ------------------------------------------------------------------ #
    @app.get("/health")
    def health():
        """Liveness + readiness probe. Returns 503 if DB is unreachable."""
        try:
            ping(engine)
        except SQLAlchemyError as exc:
            logger.error(f"Health check failed: {exc}")
            return jsonify({"status": "error", "database": "unreachable"}), 503

        return jsonify({
            "status": "ok",
            "database": "reachable",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }), 200

    logger.info(f"Storefront cart API ready ({config.environment})")
    return app


if __name__ == "__main__":
    settings = get_config()
    application = create_app(settings)
    application.run(debug=settings.app.debug, host=settings.app.host, port=settings.app.port)
