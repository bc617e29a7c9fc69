"""Flask application wiring for the decoder API."""

from __future__ import annotations

import argparse
from typing import Optional

from flask import Flask

from voyager.logging import configure_logging


def register_blueprints(app: Flask) -> None:
    from .decoder import decoder_bp

    app.register_blueprint(decoder_bp)


def create_app() -> Flask:
    app = Flask(__name__)
    register_blueprints(app)
    return app


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description='Golden Record decoder API server')
    parser.add_argument('--host', default='127.0.0.1')
    parser.add_argument('--port', type=int, default=5050)
    parser.add_argument('--log-level', default=None)
    args = parser.parse_args(argv)

    configure_logging(level=args.log_level)
    create_app().run(host=args.host, port=args.port, threaded=True)
