"""
Search Service

Dispatches catalog searches to the search engine and normalizes the
responses into {'hits': [...], 'count': N} envelopes.

- type 'all' runs one msearch covering artist, album, track and document
- any other type runs one search against that index

An empty params dict means "no constraints": every index is sampled with
a random-score query instead.

Errors raised by the client are not caught here; callers see them as the
client raised them. A failed sub-search inside an msearch response raises
a TransportError too, so a batched search either returns every index or
nothing.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Optional, Union

from opensearchpy.exceptions import TransportError

import search_client
from search_queries import (
    build_album_search,
    build_artist_search,
    build_document_search,
    build_random_query,
    build_track_search,
)

logger = logging.getLogger(__name__)


class InvalidIndexError(ValueError):
    """Raised when a search type names no known index"""
    def __init__(self, index_type):
        self.index_type = index_type
        super().__init__(f"Invalid index for typed search: {index_type!r}")


class EntityType(str, Enum):
    ALL = 'all'
    ARTIST = 'artist'
    ALBUM = 'album'
    TRACK = 'track'
    DOCUMENT = 'document'

    @classmethod
    def parse(cls, value: Union[str, 'EntityType']) -> 'EntityType':
        try:
            return cls(value)
        except ValueError:
            raise InvalidIndexError(value) from None


# Index order is significant: msearch responses come back positionally
INDEX_ORDER = (EntityType.ARTIST, EntityType.ALBUM, EntityType.TRACK, EntityType.DOCUMENT)

QUERY_BUILDERS: Dict[EntityType, Callable[..., Dict[str, Any]]] = {
    EntityType.ARTIST: build_artist_search,
    EntityType.ALBUM: build_album_search,
    EntityType.TRACK: build_track_search,
    EntityType.DOCUMENT: build_document_search,
}


class MultiSearchResult(NamedTuple):
    """Envelopes for every index, in INDEX_ORDER"""
    artists: Dict[str, Any]
    albums: Dict[str, Any]
    tracks: Dict[str, Any]
    documents: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._asdict())


# ============================================================================
# RESULT NORMALIZATION
# ============================================================================

def format_results(results: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Normalize an engine response into a result envelope

    A missing response is an empty result, not an error. Hits are passed
    through exactly as the engine returned them.

    Args:
        results: Engine search response, or None

    Returns:
        Dict with 'hits' (list) and 'count' (int)
    """
    formatted = {
        'hits': [],
        'count': 0,
    }

    if results is not None:
        formatted['hits'] = results['hits']['hits']
        formatted['count'] = results['hits']['total']['value']

    return formatted


# ============================================================================
# QUERY COMPILATION
# ============================================================================

def get_search_body(params: Dict[str, Any], index_type: EntityType,
                    options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Compile the query body for a single index"""
    return QUERY_BUILDERS[index_type](params, options)


def get_queries(params: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Build the msearch body: a header/body pair per index, in INDEX_ORDER

    Empty params produce a random-score body for every index.
    """
    lines = []
    for index_type in INDEX_ORDER:
        body = build_random_query() if not params else get_search_body(params, index_type)
        lines.append({'index': index_type.value})
        lines.append(body)
    return lines


# ============================================================================
# DISPATCH
# ============================================================================

def search(params: Dict[str, Any], type: Union[str, EntityType] = EntityType.ALL,
           options: Optional[Dict[str, Any]] = None) -> Union[Dict[str, Any], MultiSearchResult]:
    """
    Search the catalog

    Args:
        params: Search params ({'term': ..., 'album': {...}, 'track': {...}}),
            or {} for a random sample
        type: 'all', 'artist', 'album', 'track' or 'document'
        options: Optional {'from': int, 'size': int}

    Returns:
        MultiSearchResult for 'all', otherwise a single result envelope

    Raises:
        InvalidIndexError: type is not a known index (no request is made)
    """
    index_type = EntityType.parse(type)
    params = params or {}

    if index_type is EntityType.ALL:
        return do_multi_search(params)
    return do_typed_search(params, index_type, options)


def msearch_item_error(item: Dict[str, Any]) -> TransportError:
    """Build the TransportError the engine would have raised for a failed msearch item"""
    error = item['error']
    error_type = error.get('type') if isinstance(error, dict) else error
    return TransportError(item.get('status', 'N/A'), error_type, error)


def do_multi_search(params: Dict[str, Any]) -> MultiSearchResult:
    """Search every index with a single msearch request"""
    lines = get_queries(params)
    logger.info(f"msearch across {len(INDEX_ORDER)} indexes (random sample: {not params})")

    try:
        response = search_client.get_client().msearch(body=lines)
    except Exception as e:
        logger.error(f"msearch failed: {e}")
        raise

    responses = response.get('responses') or []
    envelopes = []
    for position, index_type in enumerate(INDEX_ORDER):
        item = responses[position] if position < len(responses) else None
        if item is not None and 'error' in item:
            logger.error(f"msearch item for '{index_type.value}' failed: {item['error']}")
            raise msearch_item_error(item)
        envelopes.append(format_results(item))

    return MultiSearchResult(*envelopes)


def do_typed_search(params: Dict[str, Any], index_type: EntityType,
                    options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Search a single index

    Options are merged over the compiled body, so an explicit from/size
    always wins.
    """
    if index_type not in QUERY_BUILDERS:
        raise InvalidIndexError(index_type.value)

    main_body = build_random_query() if not params else get_search_body(params, index_type, options)
    body = {**main_body, **(options or {})}

    logger.info(f"search on '{index_type.value}' (random sample: {not params})")
    try:
        results = search_client.get_client().search(index=index_type.value, body=body)
    except Exception as e:
        logger.error(f"search on '{index_type.value}' failed: {e}")
        raise

    return format_results(results)


# ============================================================================
# WRITES
# ============================================================================

def bulk(body: List[Dict[str, Any]]):
    """Run a bulk request and refresh so the documents are searchable right away"""
    return search_client.get_client().bulk(body=body, refresh=True)


def count(index: str) -> int:
    """Number of documents in an index"""
    response = search_client.get_client().count(index=index)
    return response['count']


def update(index: str, doc_id: str, doc: Dict[str, Any]):
    """
    Upsert a document

    Creates the document when it does not exist yet, otherwise merges
    doc's fields into it.
    """
    return search_client.get_client().update(
        index=index,
        id=doc_id,
        body={
            'doc': doc,
            'doc_as_upsert': True,
        },
    )


def build_bulk_actions(index: str, records: Iterable[Dict[str, Any]],
                       id_fn: Callable[[Dict[str, Any]], str]) -> List[Dict[str, Any]]:
    """
    Build a bulk body indexing each record under its derived identifier

    Args:
        index: Target index name
        records: Documents to index
        id_fn: Maps a record to its document identifier

    Returns:
        Alternating action / document list accepted by bulk()
    """
    actions = []
    for record in records:
        actions.append({'index': {'_index': index, '_id': id_fn(record)}})
        actions.append(record)
    return actions
