"""
Search Query Builders

Compiles application search parameters into engine query bodies for the
artist, album, track and document indexes.

Functions in this module are stateless: every builder returns a fresh
query body and never modifies the params it was given.
"""

import copy
import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


# ============================================================================
# FIELD CONFIGURATION
# ============================================================================

ARTIST_FIELDS = ['normalized_name', 'name']

# Title fields weighted highest
ALBUM_FIELDS = [
    'normalized_title^3',
    'title^2',
    'album_artist.normalized_name',
    'album_artist.name',
    'label',
]

# Favor the track's own title and artist over album-level attribution
TRACK_FIELDS = [
    'normalized_title^4',
    'title^3',
    'track_artist.normalized_name^2',
    'track_artist.name^2',
    'album.album_artist.normalized_name',
    'album.album_artist.name',
    'album.normalized_title',
    'album.title',
]

DOCUMENT_FIELDS = ['normalized_unsafe_text', 'unsafe_text']

DOCUMENT_HIGHLIGHT = {
    'fields': {
        '*unsafe_text': {},
    },
    'number_of_fragments': 3,
    'pre_tags': ['<mark>'],
    'post_tags': ['</mark>'],
}

DEFAULT_FROM = 0
DEFAULT_SIZE = 10
DEFAULT_ARTIST_SIZE = 5

# Filter value meaning "no constraint" for tag filters
ANY_TAG = 'any'

# Filter keys that constrain the current_tags field
TAG_FILTER_KEYS = ('rotation', 'local')


# ============================================================================
# QUERY BODY HELPERS
# ============================================================================

def build_query_obj(options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Build an empty paginated bool query body

    Args:
        options: Optional dict with 'from' and 'size' keys

    Returns:
        Dict with from, size and an empty bool query
    """
    options = options or {}
    return {
        'from': options.get('from', DEFAULT_FROM),
        'size': options.get('size', DEFAULT_SIZE),
        'query': {
            'bool': {},
        },
    }


def with_bool(query_obj: Dict[str, Any], **clauses) -> Dict[str, Any]:
    """
    Return a copy of query_obj with clauses merged into its bool node

    The original body is left untouched so a partially built query can
    never leak into another one.
    """
    updated = copy.deepcopy(query_obj)
    updated['query']['bool'].update(copy.deepcopy(clauses))
    return updated


def build_clause(clause_type: str, field: str, value: Any) -> Dict[str, Any]:
    """Build a single-field clause such as {'match_phrase': {field: value}}"""
    return {clause_type: {field: value}}


def build_fuzzy_multi_match(term: str, fields: List[str]) -> Dict[str, Any]:
    """
    Build the should-cluster used for free text matching

    An exact AND match is boosted; a typo-tolerant match (one edit,
    two-character prefix) gives recall without the boost. At least one
    of the two must match.

    Args:
        term: Search text
        fields: Field names, optionally with ^boost suffixes

    Returns:
        Dict with 'minimum_should_match' and 'should' keys
    """
    return {
        'minimum_should_match': 1,
        'should': [
            {
                'multi_match': {
                    'query': term,
                    'operator': 'AND',
                    'fields': list(fields),
                    'boost': 2,
                },
            },
            {
                'multi_match': {
                    'query': term,
                    'operator': 'AND',
                    'fuzziness': 1,
                    'prefix_length': 2,
                    'fields': list(fields),
                },
            },
        ],
    }


def build_random_query() -> Dict[str, Any]:
    """Query body that samples an index in random order"""
    return {
        'query': {
            'function_score': {
                'random_score': {},
            },
        },
    }


# ============================================================================
# FILTERS
# ============================================================================

def build_album_filters(params: Dict[str, Any], prefix: str = '') -> List[Dict[str, Any]]:
    """
    Build filter clauses from an album filter mapping

    One clause per key, in the mapping's order:
    - rotation / local: terms on current_tags, skipped when the value is 'any'
    - is_compilation: match on is_compilation
    - anything else: match_phrase on the field of the same name

    rotation and local both target current_tags, so supplying both ANDs
    the two tags together.

    Args:
        params: Field name -> filter value
        prefix: Prepended to every field name (e.g. 'album.' for tracks)

    Returns:
        List of filter clauses
    """
    filters = []
    for key, value in params.items():
        if key in TAG_FILTER_KEYS:
            if value != ANY_TAG:
                filters.append(build_clause('terms', f'{prefix}current_tags', [value]))
        elif key == 'is_compilation':
            filters.append(build_clause('match', f'{prefix}{key}', value))
        else:
            filters.append(build_clause('match_phrase', f'{prefix}{key}', value))

    logger.debug(f"Album filters (prefix={prefix!r}): {filters}")
    return filters


def build_duration_filter(duration: Dict[str, Any]) -> Dict[str, Any]:
    """
    Build a range clause on duration_ms

    An empty-string upper bound means "no upper bound" and is dropped.
    """
    bounds = {
        key: value for key, value in duration.items()
        if not (key == 'lte' and value == '')
    }
    return {'range': {'duration_ms': bounds}}


def build_track_filters(track: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Build filter clauses from a track filter mapping

    Args:
        track: May contain duration_ms (range bounds), is_recommended and a
            nested album filter mapping

    Returns:
        List of filter clauses (empty when nothing applies)
    """
    filters = []

    if isinstance(track.get('duration_ms'), dict) and track['duration_ms']:
        filters.append(build_duration_filter(track['duration_ms']))

    if track.get('is_recommended'):
        filters.append(build_clause('match', 'current_tags', 'recommended'))

    if isinstance(track.get('album'), dict):
        filters.extend(build_album_filters(track['album'], prefix='album.'))

    return filters


# ============================================================================
# ENTITY SEARCHES
# ============================================================================

def build_artist_search(params: Dict[str, Any], options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Artist search; returns fewer hits (5) unless options say otherwise"""
    if options is None:
        options = {'size': DEFAULT_ARTIST_SIZE}
    query_obj = build_query_obj(options)

    if params.get('term'):
        query_obj = with_bool(query_obj, **build_fuzzy_multi_match(params['term'], ARTIST_FIELDS))

    return query_obj


def build_album_search(params: Dict[str, Any], options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Album search: fuzzy title/artist/label match plus album filters"""
    query_obj = build_query_obj(options)

    if params.get('term'):
        query_obj = with_bool(query_obj, **build_fuzzy_multi_match(params['term'], ALBUM_FIELDS))

    if isinstance(params.get('album'), dict):
        query_obj = with_bool(query_obj, filter=build_album_filters(params['album']))

    return query_obj


def build_track_search(params: Dict[str, Any], options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Track search: fuzzy title/artist/album match plus track filters

    When params carries a 'track' mapping the bool query always gets a
    filter list, even if it ends up empty.
    """
    query_obj = build_query_obj(options)

    if params.get('term'):
        query_obj = with_bool(query_obj, **build_fuzzy_multi_match(params['term'], TRACK_FIELDS))

    if isinstance(params.get('track'), dict):
        query_obj = with_bool(query_obj, filter=build_track_filters(params['track']))

    return query_obj


def build_document_search(params: Dict[str, Any], options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Full-text document search with highlighted fragments

    Documents use a plain multi_match rather than the fuzzy bool query.
    """
    options = options or {}
    multi_match = {'fields': list(DOCUMENT_FIELDS)}
    if params.get('term') is not None:
        multi_match = {'query': params['term'], **multi_match}

    return {
        'from': options.get('from', DEFAULT_FROM),
        'size': options.get('size', DEFAULT_SIZE),
        'query': {
            'multi_match': multi_match,
        },
        'highlight': copy.deepcopy(DOCUMENT_HIGHLIGHT),
    }
