#!/usr/bin/env python3
"""
NWP Tourism API - HTTP backend for the North Western Province tourism map.
Serves tourism assets and the province boundary as GeoJSON, collects
location feedback and accepts bulk GeoJSON uploads from administrators.
"""

import argparse
import errno
import json
import logging
import socket
import sys
from typing import Optional

from colorama import Fore, init
from flask import Blueprint, Flask, current_app, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import RequestEntityTooLarge

from app.config import AppConfig, setup_logging
from app.errors import StartupError, StorageError, ValidationError
from app.repositories import (
    AssetRepository, BoundaryRepository, DocumentStore, FeedbackRepository,
)
from app.services import StatisticsService

# Initialize colorama for cross-platform colored terminal output
init(autoreset=True)

api_logger = logging.getLogger('nwp.api')

api = Blueprint('api', __name__, url_prefix='/api')

_TEXT = {'Content-Type': 'text/plain; charset=utf-8'}


class Services:
    """Everything a request handler needs, built once per application."""

    def __init__(self, config: AppConfig) -> None:
        self.config = config
        self.store = DocumentStore(config.document_paths())
        self.assets = AssetRepository(self.store)
        self.boundary = BoundaryRepository(self.store)
        self.feedback = FeedbackRepository(self.store)
        self.statistics = StatisticsService(self.assets)


def _services() -> Services:
    return current_app.extensions['nwp']


# ---------------------------------------------------------------------------
# Read endpoints
# ---------------------------------------------------------------------------

@api.route('/assets')
def api_assets():
    """Return all tourism assets, optionally filtered with ``?category=``."""
    category = request.args.get('category')
    try:
        if category and category != 'all':
            return jsonify(_services().assets.get_by_category(category))
        return jsonify(_services().assets.get_all())
    except StorageError:
        api_logger.exception("Error reading tourism assets")
    except Exception:
        api_logger.exception("Unexpected error serving /api/assets")
    return jsonify({'error': 'Failed to retrieve tourism assets'}), 500


@api.route('/boundary')
def api_boundary():
    """Return the province boundary FeatureCollection."""
    try:
        return jsonify(_services().boundary.get())
    except StorageError:
        api_logger.exception("Error reading boundary data")
    except Exception:
        api_logger.exception("Unexpected error serving /api/boundary")
    return jsonify({'error': 'Failed to retrieve boundary data'}), 500


@api.route('/stats/category-distribution')
def api_category_distribution():
    """Return ``[{category, count}]`` for the current assets."""
    try:
        return jsonify(_services().statistics.category_distribution())
    except StorageError:
        api_logger.exception("Error computing category distribution")
    except Exception:
        api_logger.exception("Unexpected error serving category distribution")
    return jsonify({'error': 'Failed to compute category distribution'}), 500


# ---------------------------------------------------------------------------
# Write endpoints
# ---------------------------------------------------------------------------

@api.route('/feedback', methods=['POST'])
def api_feedback():
    """Store a new location suggestion.

    Request JSON: ``name``, ``description``, ``latitude``, ``longitude``.
    """
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        payload = {}
    try:
        _services().feedback.append(payload)
        return jsonify({'success': True, 'message': 'Thank you for your contribution!'})
    except ValidationError as e:
        return jsonify({'success': False, 'error': str(e)}), 400
    except StorageError:
        api_logger.exception("Error storing feedback")
    except Exception:
        api_logger.exception("Unexpected error storing feedback")
    return jsonify({'success': False, 'error': 'Server error occurred.'}), 500


@api.route('/upload-geojson', methods=['POST'])
def api_upload_geojson():
    """Replace the whole asset dataset with an uploaded GeoJSON file.

    Expects a multipart form with the file in the ``geojsonFile`` field.
    Responses are plain text so the admin page can show them as-is.
    """
    upload = request.files.get('geojsonFile')
    if upload is None or not upload.filename:
        return 'No file uploaded.', 400, _TEXT
    try:
        raw = upload.read()
        try:
            collection = json.loads(raw.decode('utf-8-sig'))
        except (UnicodeDecodeError, ValueError) as e:
            raise ValidationError('Uploaded file is not valid JSON.') from e
        count = _services().assets.replace_all(collection)
        return (f'Successfully uploaded and replaced data with {count} new assets.',
                200, _TEXT)
    except ValidationError as e:
        api_logger.info("Rejected GeoJSON upload %r: %s", upload.filename, e)
        return str(e), 400, _TEXT
    except StorageError:
        api_logger.exception("Error saving uploaded GeoJSON")
    except Exception:
        api_logger.exception("Unexpected error processing GeoJSON upload")
    return 'Failed to process GeoJSON file.', 500, _TEXT


# ---------------------------------------------------------------------------
# API Documentation — OpenAPI 3.0
# ---------------------------------------------------------------------------

@api.route('/openapi.json')
def api_openapi_spec():
    """Serve the OpenAPI 3.0 specification as JSON."""
    try:
        from openapi_spec import build_spec
        server_url = request.url_root.rstrip('/')
        return jsonify(build_spec(server_url=server_url))
    except Exception as e:
        api_logger.error("Error building OpenAPI spec: %s", e)
        return jsonify({'error': 'Could not generate spec'}), 500


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------

def create_app(config: Optional[AppConfig] = None) -> Flask:
    """Build the Flask application for *config* (environment if omitted)."""
    if config is None:
        config = AppConfig.from_env()
    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = config.max_upload_mb * 1024 * 1024
    app.json.sort_keys = False
    app.extensions['nwp'] = Services(config)

    CORS(app,
         resources={r'/api/*': {'origins': config.allowed_origins}},
         methods=['GET', 'POST', 'OPTIONS'],
         allow_headers=['Content-Type', 'Authorization'],
         supports_credentials=True)

    @app.errorhandler(RequestEntityTooLarge)
    def upload_too_large(e):
        api_logger.info("Rejected request over %d MB: %s", config.max_upload_mb, request.path)
        return f'File too large. The upload limit is {config.max_upload_mb} MB.', 413, _TEXT

    app.register_blueprint(api)
    api_logger.debug("Application created with %r", config)
    return app


def preflight(services: Services) -> None:
    """Fail fast if the boundary document's storage is unreachable.

    Raises:
        StartupError: see :meth:`DocumentStore.check_location`.
    """
    services.store.check_location('boundary')


def _port_is_free(host: str, port: int) -> bool:
    try:
        family, socktype, proto, _, sockaddr = socket.getaddrinfo(
            host, port, type=socket.SOCK_STREAM, flags=socket.AI_PASSIVE)[0]
    except socket.gaierror as e:
        raise StartupError(f"Cannot resolve host {host!r}: {e}") from e
    sock = socket.socket(family, socktype, proto)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind(sockaddr)
        return True
    except OSError as e:
        if e.errno not in (errno.EADDRINUSE, errno.EACCES):
            api_logger.warning("Could not check %s:%d: %s", host, port, e)
        return False
    finally:
        sock.close()


def find_available_port(host: str, start_port: int, attempts: int) -> int:
    """Return the first bindable port in ``[start_port, start_port + attempts)``.

    Raises:
        StartupError: every port in the range is busy, or *host* cannot
            be resolved.
    """
    last = min(start_port + max(1, attempts), 65536)
    for port in range(start_port, last):
        if _port_is_free(host, port):
            return port
        api_logger.warning("Port %d is busy, trying port %d...", port, port + 1)
    raise StartupError(
        f"No free port between {start_port} and {last - 1} on {host}")


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='NWP Tourism API server')
    parser.add_argument('--host', default=None, help='Interface to bind (env NWP_HOST)')
    parser.add_argument('--port', type=int, default=None, help='First port to try (env PORT)')
    parser.add_argument('--data-dir', default=None, help='Directory with the JSON documents')
    parser.add_argument('--log-level', default=None,
                        help='DEBUG, INFO, WARNING, ERROR or CRITICAL (env NWP_LOG_LEVEL)')
    return parser.parse_args(argv)


def build_config(argv=None) -> AppConfig:
    """Environment settings with command-line flags layered on top."""
    args = _parse_args(argv)
    config = AppConfig.from_env()
    if args.host:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.data_dir:
        config.data_dir = args.data_dir
    if args.log_level:
        config.log_level = args.log_level
    return config


def _fail(message: str) -> None:
    api_logger.critical(message)
    print(f"{Fore.RED}Error: {message}")
    sys.exit(1)


def main(argv=None) -> None:
    """Main entry point for the API server"""
    config = build_config(argv)
    setup_logging(config.log_level)

    app = create_app(config)
    try:
        preflight(app.extensions['nwp'])
    except StartupError as e:
        _fail(f"{e}. Check NWP_DATA_DIR (currently {config.data_dir!r}).")

    try:
        port = find_available_port(config.host, config.port, config.port_attempts)
    except StartupError as e:
        _fail(f"{e}. Set PORT or NWP_PORT_ATTEMPTS.")

    print("\n" + "=" * 60)
    print(f"{Fore.GREEN}NWP Tourism API is running on http://{config.host}:{port}")
    print("=" * 60)
    print(f"\nData directory: {config.data_dir}")
    print(f"Allowed origins: {', '.join(config.allowed_origins)}")
    print("\nPress Ctrl+C to stop the server")
    print("=" * 60 + "\n")

    try:
        app.run(host=config.host, port=port, debug=False)
    except KeyboardInterrupt:
        print(f"\n{Fore.YELLOW}NWP Tourism API stopped")


if __name__ == '__main__':
    main()
