# gunicorn.conf.py
# Gunicorn configuration file

import logging
import os

# Logging
accesslog = '-'  # Log to stdout
errorlog = '-'   # Log to stderr
loglevel = 'info'

# Worker configuration
bind = f"0.0.0.0:{os.environ.get('PORT', '5001')}"
workers = int(os.environ.get('WEB_CONCURRENCY', 1))
worker_class = 'sync'
timeout = 120

# Server mechanics
daemon = False
pidfile = None
umask = 0
user = None
group = None
tmp_upload_dir = None

# Hooks
def post_worker_init(worker):
    """
    Called after a worker has been forked and initialized.
    Each worker gets its own search client; create it up front so the
    first request doesn't pay for it.
    """
    logger = logging.getLogger(__name__)
    logger.info(f"=== Post-worker init hook called for worker PID {os.getpid()} ===")

    try:
        import search_client
        search_client.get_client()
        logger.info(f"Search client initialized in gunicorn worker PID {os.getpid()}")
    except Exception as e:
        logger.error(f"Error initializing search client in gunicorn worker: {e}", exc_info=True)


def worker_exit(server, worker):
    """
    Called when a worker exits.
    """
    logger = logging.getLogger(__name__)
    logger.info(f"Worker {worker.pid} exiting - closing search client")

    try:
        import search_client
        search_client.close_client()
    except Exception as e:
        logger.error(f"Error closing search client: {e}")
