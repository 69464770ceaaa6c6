# routes/health.py
from flask import Blueprint, jsonify
import logging
import time

import search_client
import search_service
from search_service import INDEX_ORDER

logger = logging.getLogger(__name__)
health_bp = Blueprint('health', __name__)

@health_bp.route('/health', methods=['GET'])
def health_check():
    """Health check: search cluster reachability and per-index document counts"""
    health_status = {
        'status': 'unknown',
        'search_engine': 'unknown',
        'index_counts': None,
        'timestamp': time.time()
    }

    if not search_client.ping():
        health_status['status'] = 'unhealthy'
        health_status['search_engine'] = 'unreachable'
        return jsonify(health_status), 503

    try:
        health_status['index_counts'] = {
            index_type.value: search_service.count(index_type.value)
            for index_type in INDEX_ORDER
        }

        health_status['status'] = 'healthy'
        health_status['search_engine'] = 'connected'
        return jsonify(health_status), 200

    except Exception as e:
        logger.error(f"Health check failed: {e}")
        health_status['status'] = 'unhealthy'
        health_status['search_engine'] = f'error: {str(e)}'
        return jsonify(health_status), 503
