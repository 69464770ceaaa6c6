"""
Catalog Search API Backend
A Flask API in front of the artist/album/track/document search indexes
"""

from flask import Flask, jsonify, request
from flask_cors import CORS
import atexit
import logging
import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Configuration
from config import configure_logging, init_app_config

import search_client

logger = configure_logging()

# Create Flask app
app = Flask(__name__)
CORS(app)
init_app_config(app)

logger.info(f"Search domain: {os.environ.get('ELASTICSEARCH_DOMAIN', 'localhost:9200')}")
logger.info(f"Flask app initialized in PID {os.getpid()}")

# Register all route blueprints
from routes import register_blueprints
register_blueprints(app)


@app.errorhandler(404)
def not_found(error):
    return jsonify({'error': 'Not found', 'path': request.path}), 404


# Request/response logging
@app.before_request
def log_request():
    """Log incoming requests"""
    logger.info(f"{request.method} {request.full_path.rstrip('?')}")

@app.after_request
def log_response(response):
    """Log response status"""
    logger.info(f"{request.method} {request.path} - {response.status_code}")
    return response


def cleanup_connections():
    """Close the search client on shutdown"""
    logger.info("Shutting down search client...")
    search_client.close_client()

atexit.register(cleanup_connections)


if __name__ == '__main__':
    # Running directly with 'python app.py' (not gunicorn)
    logger.info("Starting Flask application directly (not gunicorn)...")
    logger.info("Search client will initialize on first request")
    app.run(debug=True, host='0.0.0.0', port=int(os.environ.get('PORT', 5001)))
