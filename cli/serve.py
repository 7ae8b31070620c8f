#!/usr/bin/env python3

from web import create_app
from logger import get_logger

logger = get_logger()


def cmd_serve(args, services):
    """Apply pending migrations and run the web server."""
    services.db_manager.apply_migrations()

    host = args.host or services.config.web_host
    port = args.port or services.config.web_port
    logger.info(f"Serving on http://{host}:{port}")

    app = create_app(services)
    # Feed callbacks run on the request thread; one request at a time.
    app.run(host=host, port=port, debug=args.debug, threaded=False)


def setup_parser(subparsers):
    """Setup serve command parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "serve",
        help="Run the web application",
        description="Serve the dashboard pages and the JSON API",
    )
    parser.add_argument("--host", help="Bind address (default from config)")
    parser.add_argument("--port", type=int, help="Port (default from config)")
    parser.add_argument("--debug", action="store_true", help="Enable Flask debug mode")
    parser.set_defaults(func=cmd_serve)
