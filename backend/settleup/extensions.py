import logging

from flask_cors import CORS

cors = CORS()

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def init_logging(app):
    """Configure root logging from the app's LOG_LEVEL."""
    level = getattr(logging, app.config.get("LOG_LEVEL", "INFO"), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("settleup").setLevel(level)
    app.logger.setLevel(level)


def init_cors(app):
    cors.init_app(
        app,
        supports_credentials=True,
        resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}}
    )
