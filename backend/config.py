"""
Configuration Module for Catalog Search API
Handles logging setup and Flask app initialization
"""

import os
import logging

DEFAULT_MAX_PAGE_SIZE = 100


def configure_logging():
    """
    Configure application logging with standard format

    Returns:
        Logger instance for the config module
    """
    logging.basicConfig(
        level=os.environ.get('LOG_LEVEL', 'INFO').upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    return logging.getLogger(__name__)


def init_app_config(app):
    """
    Initialize Flask app configuration

    This sets up:
    - SEARCH_MAX_PAGE_SIZE: upper bound on the 'size' a caller may request
    - JSON responses keep hit fields in engine order

    Args:
        app: Flask application instance
    """
    app.config['SEARCH_MAX_PAGE_SIZE'] = int(
        os.environ.get('SEARCH_MAX_PAGE_SIZE', DEFAULT_MAX_PAGE_SIZE)
    )
    app.json.sort_keys = False
