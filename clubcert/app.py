import logging
import os
import sys

from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

from .models import Certificate  # noqa: E402


def create_app():
    app = Flask(__name__)
    app.secret_key = os.getenv("SECRET_KEY", "dev")
    app.config["PREFERRED_URL_SCHEME"] = "https"

    DB_USER = os.getenv("DB_USER", "clubcert")
    DB_PASSWORD = os.getenv("POSTGRES_PASSWORD", "postgres")
    DB_HOST = os.getenv("DB_HOST", "db")
    DB_NAME = os.getenv("DB_NAME", "clubcert")
    DATABASE_URL = os.getenv(
        "DATABASE_URL",
        f"postgresql+psycopg2://{DB_USER}:{DB_PASSWORD}@{DB_HOST}/{DB_NAME}",
    )

    app.config["SQLALCHEMY_DATABASE_URI"] = DATABASE_URL
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False

    base_url = os.getenv("CERT_BASE_URL") or os.getenv(
        "BASE_URL", "http://localhost:5173"
    )
    app.config["CERT_BASE_URL"] = base_url.rstrip("/")
    app.config["CERT_TEMPLATE_DIR"] = os.getenv(
        "CERT_TEMPLATE_DIR", os.path.join(app.root_path, "assets", "cert_templates")
    )

    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    app.logger.setLevel(log_level)
    engine_logger = logging.getLogger("clubcert")
    if not engine_logger.handlers:
        engine_logger.addHandler(logging.StreamHandler(sys.stdout))
    engine_logger.setLevel(log_level)

    db.init_app(app)

    @app.get("/health")
    def health():  # pragma: no cover - simple healthcheck
        return "OK", 200

    @app.get("/verify/cert/<code>")
    def verify_public(code: str):
        from .services.certificates import build_verification
        from .shared.errors import CertificateNotFound

        service = build_verification()
        try:
            cert = service.get_by_code(code)
        except CertificateNotFound:
            return (
                jsonify(
                    {
                        "success": False,
                        "valid": False,
                        "message": "Certificate not found or invalid code",
                    }
                ),
                404,
            )
        return jsonify(
            {"success": True, "valid": True, "data": service.public_summary(cert)}
        )

    from .routes.certificates import bp as certificates_bp

    app.register_blueprint(certificates_bp)

    return app
