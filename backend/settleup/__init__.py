import logging

from flask import Flask, jsonify

from settleup.config import Config
from settleup.extensions import init_cors, init_logging

logger = logging.getLogger(__name__)


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Disable strict slashes to prevent 308 redirects that break CORS preflight
    app.url_map.strict_slashes = False

    # Init extensions
    init_logging(app)
    init_cors(app)

    # Register API blueprints
    from settleup.expenses.routes import expenses_bp
    from settleup.settlements.routes import bp as settlements_bp

    app.register_blueprint(expenses_bp, url_prefix='/api/v1/expenses')
    app.register_blueprint(settlements_bp, url_prefix='/api/v1/settlements')

    @app.route('/api/v1/health', methods=['GET'])
    def health_check():
        return jsonify({"status": "healthy"})

    logger.info("settleup app created (log level %s)", app.config["LOG_LEVEL"])
    return app
