# auth_server/__main__.py
import os
import sys

from werkzeug.serving import make_server

from . import create_flask_app
from .managers.config import load_environment
from .constants.constants_server import SERVER_HOST, SERVER_PORT, RUNNING_MESSAGE


def main() -> None:
    """Load .env, create the Flask application and serve it on port 3030."""
    load_environment()

    env = os.environ.get("FLASK_ENV", "development")
    app = create_flask_app(env)
    app.logger.debug(f"Starting in '{env}' environment")

    try:
        server = make_server(SERVER_HOST, SERVER_PORT, app, threaded=True)
    except OSError as e:
        app.logger.error(f"❌ Cannot listen on port {SERVER_PORT}: {e}")
        sys.exit(1)
    except SystemExit:
        # werkzeug exits with status 1 itself when the bind fails
        app.logger.error(f"❌ Cannot listen on port {SERVER_PORT}")
        raise

    app.logger.getChild("lifecycle").info(RUNNING_MESSAGE)
    server.serve_forever()


if __name__ == "__main__":
    main()
