"""
Flask application serving the RBWM bin collection schedule
"""
import logging
import os
import sys
from typing import Optional
from dotenv import load_dotenv
from flask import Flask, jsonify, Response

from src.data_fetchers.base_fetcher import BinDataFetcher
from src.data_fetchers.fetcher_factory import create_fetcher
from src.calendar_generator import generate_calendar_object

DEFAULT_PORT = 3000
DEFAULT_FETCHER_SOURCE = "rbwm"

logger = logging.getLogger(__name__)


def configure_logging():
    log_level_str = os.environ.get('LOG_LEVEL', 'INFO').upper()
    log_level = getattr(logging, log_level_str, logging.INFO)
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(level=log_level, stream=sys.stdout, format='%(levelname)s:%(name)s: %(message)s')
    else:
        logging.getLogger().setLevel(log_level)


def get_port() -> int:
    port_str = os.environ.get('PORT')
    if not port_str:
        return DEFAULT_PORT
    try:
        return int(port_str)
    except ValueError:
        logger.warning(f"Ignoring invalid PORT '{port_str}', using {DEFAULT_PORT}")
        return DEFAULT_PORT


def create_app(fetcher: Optional[BinDataFetcher] = None) -> Flask:
    """
    Builds the Flask app around a fetcher.

    Without an explicit fetcher, one is created from FETCHER_SOURCE with the
    in-memory cache switched on.
    """
    if fetcher is None:
        source = os.environ.get('FETCHER_SOURCE', DEFAULT_FETCHER_SOURCE)
        fetcher = create_fetcher(source=source, use_cache=True)

    app = Flask(__name__)

    @app.after_request
    def allow_cross_origin(response):
        response.headers['Access-Control-Allow-Origin'] = '*'
        return response

    @app.route('/')
    def health():
        return jsonify({'status': 'Bin Boy is running!', 'endpoint': '/collections'})

    @app.route('/collections', methods=['GET'])
    def collections():
        try:
            result = fetcher.get_collections()
            return jsonify(result.to_dict())
        except Exception as e:
            logger.exception("Unexpected error fetching collections")
            return jsonify({'success': False, 'error': str(e)}), 500

    @app.route('/collections.ics', methods=['GET'])
    def collections_calendar():
        try:
            result = fetcher.get_collections()
            if not result.success:
                return jsonify(result.to_dict()), 503
            ics_content = generate_calendar_object(result).to_ical()
        except Exception as e:
            logger.exception("Unexpected error building collections calendar")
            return jsonify({'success': False, 'error': str(e)}), 500
        return Response(
            ics_content,
            mimetype='text/calendar',
            headers={'Content-Disposition': 'attachment; filename="bin_collections.ics"'},
        )

    return app


def main():
    load_dotenv()
    configure_logging()
    app = create_app()
    port = get_port()
    logger.info(f"Bin Boy running on port {port}")
    app.run(host='0.0.0.0', port=port, threaded=True)


if __name__ == '__main__':
    main()
