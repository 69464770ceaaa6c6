#!/usr/bin/env python3
"""
Search Engine Client Utilities

Owns the single OpenSearch client shared by the Flask backend and scripts.

Configuration (environment / .env):
    ELASTICSEARCH_DOMAIN     host[:port] of the cluster (default localhost:9200)
    ELASTICSEARCH_USERNAME   basic auth user; with a password, switches to https
    ELASTICSEARCH_PASSWORD   basic auth password
    ELASTICSEARCH_TIMEOUT    request timeout in seconds (default 30)
    ELASTICSEARCH_MAXSIZE    connections kept per node (default 25)

The client is created lazily on first use. Timeouts and connection pooling
are the client's concern; nothing here retries a failed request.
"""

import os
import logging
import threading
from typing import Optional

from opensearchpy import OpenSearch

logger = logging.getLogger(__name__)


# ============================================================================
# CONFIGURATION
# ============================================================================

def get_search_config():
    """
    Read search engine settings from the environment

    Returns:
        Dict with domain, username, password, timeout and maxsize
    """
    return {
        'domain': os.environ.get('ELASTICSEARCH_DOMAIN', 'localhost:9200'),
        'username': os.environ.get('ELASTICSEARCH_USERNAME'),
        'password': os.environ.get('ELASTICSEARCH_PASSWORD'),
        'timeout': int(os.environ.get('ELASTICSEARCH_TIMEOUT', '30')),
        'maxsize': int(os.environ.get('ELASTICSEARCH_MAXSIZE', '25')),
    }


def build_host_url(config):
    """
    Resolve the cluster URL

    Credentials imply a hosted cluster behind TLS; without them we talk
    plain http to a local/dev node.
    """
    if config.get('username') and config.get('password'):
        return f"https://{config['domain']}"
    return f"http://{config['domain']}"


def create_client(config=None) -> OpenSearch:
    """
    Create a new OpenSearch client

    Args:
        config: Settings dict (default: read from the environment)

    Returns:
        OpenSearch client instance
    """
    config = config or get_search_config()
    url = build_host_url(config)

    kwargs = {
        'timeout': config['timeout'],
        'maxsize': config['maxsize'],
    }
    if config.get('username') and config.get('password'):
        kwargs['http_auth'] = (config['username'], config['password'])

    logger.info(f"Creating search client for {url} (auth: {'http_auth' in kwargs})")
    return OpenSearch([url], **kwargs)


# ============================================================================
# SHARED CLIENT
# ============================================================================

_client: Optional[OpenSearch] = None
_client_lock = threading.Lock()


def get_client() -> OpenSearch:
    """Get the process-wide client, creating it on first use"""
    global _client

    if _client is not None:
        return _client

    with _client_lock:
        if _client is None:
            _client = create_client()
        return _client


def set_client(client: Optional[OpenSearch]):
    """Replace the process-wide client (None forces re-creation on next use)"""
    global _client
    with _client_lock:
        _client = client


def close_client():
    """Close the shared client's connections, if one was created"""
    global _client

    with _client_lock:
        if _client is None:
            return
        try:
            _client.close()
            logger.info("Search client closed")
        except Exception as e:
            logger.error(f"Error closing search client: {e}")
        finally:
            _client = None


def ping() -> bool:
    """Check whether the cluster answers"""
    try:
        return bool(get_client().ping())
    except Exception as e:
        logger.error(f"Search cluster ping failed: {e}")
        return False
