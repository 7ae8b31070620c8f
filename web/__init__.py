"""Flask application: JSON API and server-rendered pages."""

from datetime import datetime
from flask import Flask
from tools.formatting import format_currency, format_date


def create_app(services, clock=None) -> Flask:
    """Create the Flask application.

    Args:
        services: Services container shared by all requests.
        clock: Returns the current time; defaults to datetime.now.

    Returns:
        Configured Flask app.
    """
    from web import api, pages

    app = Flask(__name__)
    app.secret_key = services.config.secret_key
    app.config["CLOCK"] = clock or datetime.now
    app.extensions["services"] = services

    symbol = services.config.currency_symbol
    app.add_template_filter(lambda amount: format_currency(amount, symbol), "currency")
    app.add_template_filter(format_date, "date")

    app.register_blueprint(api.bp)
    app.register_blueprint(pages.bp)
    return app
