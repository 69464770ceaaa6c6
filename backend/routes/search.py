# routes/search.py
"""
Catalog Search API Routes

- GET  /search   - Search via query string (nested filters in bracket notation)
- POST /search   - Search via JSON body {"params": {...}, "type": "...", "options": {...}}

type defaults to 'all', which returns results for every index:
    {"artists": {...}, "albums": {...}, "tracks": {...}, "documents": {...}}
Any other type returns a single {"hits": [...], "count": N} envelope.
"""
from flask import Blueprint, current_app, jsonify, request
import logging
from opensearchpy.exceptions import OpenSearchException

import search_service
from search_service import InvalidIndexError, MultiSearchResult
from utils.helpers import parse_bool, parse_int_arg, parse_nested_args, safe_strip

logger = logging.getLogger(__name__)
search_bp = Blueprint('search', __name__)

# Query-string args that are not search params
CONTROL_ARGS = ('type', 'from', 'size')


def build_options(source):
    """
    Build pagination options from a mapping with optional 'from'/'size'

    Returns None when neither is given so each index keeps its own default size.
    """
    max_size = current_app.config.get('SEARCH_MAX_PAGE_SIZE')
    options = {}
    if source.get('from') not in (None, ''):
        options['from'] = parse_int_arg(source['from'], 'from')
    if source.get('size') not in (None, ''):
        options['size'] = parse_int_arg(source['size'], 'size', maximum=max_size)
    return options or None


def clean_section(container, key, name):
    """
    Check that a filter section is a mapping

    An empty value (album=, track=) drops the section. Any other non-mapping
    value is rejected.

    Raises:
        ValueError: the section is a scalar or list
    """
    value = container.get(key)
    if key not in container or isinstance(value, dict):
        return
    if value is None or value == '':
        del container[key]
        return
    raise ValueError(f"'{name}' must be a set of filters, e.g. {name}[field]=value")


def clean_params(params):
    """
    Normalize user-supplied params before compiling queries

    Raises:
        ValueError: a filter section is malformed
    """
    params = dict(params)

    if 'term' in params:
        term = safe_strip(params['term'])
        if term is None:
            del params['term']
        else:
            params['term'] = term

    clean_section(params, 'album', 'album')
    clean_section(params, 'track', 'track')

    if 'track' in params:
        track = dict(params['track'])
        clean_section(track, 'duration_ms', 'track[duration_ms]')
        clean_section(track, 'album', 'track[album]')
        if 'is_recommended' in track:
            track['is_recommended'] = parse_bool(track['is_recommended'])
        params['track'] = track

    return params


def run_search(params, search_type, options):
    """Run a search and turn the outcome into a JSON response"""
    try:
        results = search_service.search(params, search_type, options)
    except InvalidIndexError as e:
        return jsonify({'error': 'Invalid search type', 'detail': str(e)}), 400
    except OpenSearchException as e:
        logger.error(f"Search engine error ({search_type}): {e}")
        return jsonify({'error': 'Search engine request failed', 'detail': str(e)}), 502
    except Exception as e:
        logger.error(f"Error running search ({search_type}): {e}", exc_info=True)
        return jsonify({'error': 'Failed to run search', 'detail': str(e)}), 500

    if isinstance(results, MultiSearchResult):
        return jsonify(results.to_dict())
    return jsonify(results)


@search_bp.route('/search', methods=['GET'])
def search_get():
    """
    Search the catalog

    Query Parameters:
        term: Free text
        type: all | artist | album | track | document (default: all)
        from: Offset of the first hit
        size: Number of hits to return
        album[<field>], track[<field>], track[album][<field>]: filters
    """
    search_type = request.args.get('type', 'all')

    try:
        options = build_options(request.args)
    except ValueError as e:
        return jsonify({'error': 'Invalid pagination', 'detail': str(e)}), 400

    try:
        params = clean_params(parse_nested_args(request.args.items(multi=True), exclude=CONTROL_ARGS))
    except ValueError as e:
        return jsonify({'error': 'Invalid filters', 'detail': str(e)}), 400

    return run_search(params, search_type, options)


@search_bp.route('/search', methods=['POST'])
def search_post():
    """Search the catalog with params, type and options in a JSON body"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Request body must be a JSON object'}), 400

    params = data.get('params') or {}
    if not isinstance(params, dict):
        return jsonify({'error': "'params' must be an object"}), 400

    try:
        options = build_options(data.get('options') or {})
    except ValueError as e:
        return jsonify({'error': 'Invalid pagination', 'detail': str(e)}), 400

    try:
        params = clean_params(params)
    except ValueError as e:
        return jsonify({'error': 'Invalid filters', 'detail': str(e)}), 400

    return run_search(params, data.get('type', 'all'), options)
