import logging
import signal
import sys

from flask import Flask

from . import store
from .config import Settings
from .errors import SecretsError
from .frontend import frontend
from .identity import container_identity
from .items import ItemsClient
from .models import db
from .parameters import load_secrets
from .routes import api, items_api
from .state import ProcessState

logger = logging.getLogger(__name__)


def create_app(settings=None):
    settings = settings or Settings.from_env()

    app = Flask(__name__, static_folder=None)
    app.config["SWARMBOARD_SETTINGS"] = settings
    app.config["SQLALCHEMY_DATABASE_URI"] = settings.database_uri
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    if settings.secrets.get("secret_key"):
        app.config["SECRET_KEY"] = settings.secrets["secret_key"]

    db.init_app(app)
    store.init_store(app)

    app.extensions["swarmboard_state"] = ProcessState()
    app.register_blueprint(api)
    if settings.items_enabled:
        app.extensions["swarmboard_items"] = ItemsClient(settings)
        app.register_blueprint(items_api)
    # catch-all last so the API wins
    app.register_blueprint(frontend)
    return app


def _install_shutdown(app):
    def shutdown(signum, frame):
        logger.info("Received %s, shutting down gracefully", signal.Signals(signum).name)
        store.close_store(app)
        sys.exit(0)

    signal.signal(signal.SIGTERM, shutdown)
    signal.signal(signal.SIGINT, shutdown)


def main():
    settings = Settings.from_env()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if settings.secrets_enabled:
        try:
            load_secrets(settings)
        except SecretsError as e:
            logger.error("Failed to load secrets: %s", e)
            sys.exit(1)

    app = create_app(settings)
    _install_shutdown(app)

    hostname, container_id = container_identity()
    logger.info("swarmboard running on port %s", settings.port)
    logger.info("Host %s, container %s", hostname, container_id)
    app.run(host="0.0.0.0", port=settings.port, threaded=True)


if __name__ == "__main__":
    main()
