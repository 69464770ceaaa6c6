"""Tests for the query builders in search_queries."""

import pytest

from search_queries import (
    ALBUM_FIELDS,
    ARTIST_FIELDS,
    TRACK_FIELDS,
    build_album_filters,
    build_album_search,
    build_artist_search,
    build_document_search,
    build_fuzzy_multi_match,
    build_random_query,
    build_track_search,
)


# ============================================================================
# FUZZY MATCH
# ============================================================================

@pytest.mark.parametrize('term', ['coltrane', 'blue train', 'a'])
def test_fuzzy_multi_match_has_exact_and_fuzzy_clauses(term):
    fuzzy = build_fuzzy_multi_match(term, ['title'])

    assert fuzzy['minimum_should_match'] == 1
    assert len(fuzzy['should']) == 2

    exact, typo = (clause['multi_match'] for clause in fuzzy['should'])
    assert exact == {'query': term, 'operator': 'AND', 'fields': ['title'], 'boost': 2}
    assert typo['query'] == term
    assert typo['operator'] == 'AND'
    assert typo['fuzziness'] == 1
    assert typo['prefix_length'] == 2
    assert 'boost' not in typo


def test_fuzzy_multi_match_does_not_share_field_list():
    fields = ['title']
    fuzzy = build_fuzzy_multi_match('x', fields)
    fuzzy['should'][0]['multi_match']['fields'].append('label')

    assert fields == ['title']
    assert fuzzy['should'][1]['multi_match']['fields'] == ['title']


# ============================================================================
# ALBUM FILTERS
# ============================================================================

def test_album_filters_rotation_any_adds_nothing():
    assert build_album_filters({'rotation': 'any'}) == []
    assert build_album_filters({'local': 'any'}, prefix='album.') == []


def test_album_filters_rotation_and_local_both_constrain_current_tags():
    # Both keys target current_tags; the engine ANDs the two clauses.
    filters = build_album_filters({'rotation': 'heavy', 'local': 'local'})

    assert filters == [
        {'terms': {'current_tags': ['heavy']}},
        {'terms': {'current_tags': ['local']}},
    ]


def test_album_filters_is_compilation_uses_match():
    assert build_album_filters({'is_compilation': True}) == [
        {'match': {'is_compilation': True}},
    ]


@pytest.mark.parametrize('key,value', [
    ('label', 'Blue Note'),
    ('genre', 'Jazz'),
    ('year', 1959),
])
def test_album_filters_unknown_keys_use_match_phrase(key, value):
    filters = build_album_filters({key: value}, prefix='album.')

    assert filters == [{'match_phrase': {f'album.{key}': value}}]


def test_album_filters_keep_input_order():
    filters = build_album_filters({
        'label': 'Impulse!',
        'rotation': 'light',
        'is_compilation': False,
        'local': 'any',
    })

    assert filters == [
        {'match_phrase': {'label': 'Impulse!'}},
        {'terms': {'current_tags': ['light']}},
        {'match': {'is_compilation': False}},
    ]


# ============================================================================
# ENTITY SEARCHES
# ============================================================================

def test_artist_search_defaults_to_five_hits():
    query = build_artist_search({'term': 'monk'})

    assert query['from'] == 0
    assert query['size'] == 5
    assert query['query']['bool']['minimum_should_match'] == 1
    fields = query['query']['bool']['should'][0]['multi_match']['fields']
    assert fields == ARTIST_FIELDS
    assert 'filter' not in query['query']['bool']


def test_artist_search_with_options_uses_regular_defaults():
    assert build_artist_search({}, {'from': 20})['size'] == 10
    assert build_artist_search({}, {'from': 20, 'size': 7})['size'] == 7


def test_artist_search_without_term_is_empty_bool():
    assert build_artist_search({}) == {'from': 0, 'size': 5, 'query': {'bool': {}}}


def test_album_search_term_and_filters():
    query = build_album_search(
        {'term': 'kind of blue', 'album': {'rotation': 'heavy', 'label': 'Columbia'}},
        {'from': 10, 'size': 25},
    )

    assert (query['from'], query['size']) == (10, 25)
    bool_query = query['query']['bool']
    assert bool_query['should'][0]['multi_match']['fields'] == ALBUM_FIELDS
    assert bool_query['filter'] == [
        {'terms': {'current_tags': ['heavy']}},
        {'match_phrase': {'label': 'Columbia'}},
    ]


def test_album_search_without_album_has_no_filter_cluster():
    query = build_album_search({'term': 'x'})
    assert 'filter' not in query['query']['bool']


def test_track_search_duration_empty_upper_bound_is_dropped():
    params = {'track': {'duration_ms': {'gte': 1000, 'lte': ''}}}
    query = build_track_search(params)

    assert query['query']['bool']['filter'] == [{'range': {'duration_ms': {'gte': 1000}}}]
    # the caller's params are left alone
    assert params['track']['duration_ms'] == {'gte': 1000, 'lte': ''}


def test_track_search_duration_keeps_real_upper_bound():
    query = build_track_search({'track': {'duration_ms': {'gte': 1000, 'lte': 5000}}})
    assert query['query']['bool']['filter'] == [
        {'range': {'duration_ms': {'gte': 1000, 'lte': 5000}}},
    ]


def test_track_search_full_filter_list():
    query = build_track_search({
        'term': 'naima',
        'track': {
            'duration_ms': {'gte': 60000},
            'is_recommended': True,
            'album': {'rotation': 'medium', 'is_compilation': False, 'label': 'Atlantic'},
        },
    })

    bool_query = query['query']['bool']
    assert bool_query['should'][1]['multi_match']['fields'] == TRACK_FIELDS
    assert bool_query['filter'] == [
        {'range': {'duration_ms': {'gte': 60000}}},
        {'match': {'current_tags': 'recommended'}},
        {'terms': {'album.current_tags': ['medium']}},
        {'match': {'album.is_compilation': False}},
        {'match_phrase': {'album.label': 'Atlantic'}},
    ]


def test_track_search_empty_track_gives_empty_filter_list():
    with_track = build_track_search({'track': {'is_recommended': False}})
    without_track = build_track_search({'term': 'x'})

    assert with_track['query']['bool']['filter'] == []
    assert 'filter' not in without_track['query']['bool']


@pytest.mark.parametrize('album', ['', 'heavy', None, ['heavy']])
def test_album_search_ignores_non_mapping_album(album):
    query = build_album_search({'term': 'x', 'album': album})
    assert 'filter' not in query['query']['bool']


@pytest.mark.parametrize('track', ['', 'naima', None])
def test_track_search_ignores_non_mapping_track(track):
    query = build_track_search({'term': 'x', 'track': track})
    assert 'filter' not in query['query']['bool']


def test_track_search_ignores_non_mapping_sections():
    query = build_track_search({'track': {'duration_ms': '5000', 'album': 'heavy'}})
    assert query['query']['bool']['filter'] == []


def test_document_search_shape():
    query = build_document_search({'term': 'liner notes'}, {'from': 5, 'size': 2})

    assert query == {
        'from': 5,
        'size': 2,
        'query': {
            'multi_match': {
                'query': 'liner notes',
                'fields': ['normalized_unsafe_text', 'unsafe_text'],
            },
        },
        'highlight': {
            'fields': {'*unsafe_text': {}},
            'number_of_fragments': 3,
            'pre_tags': ['<mark>'],
            'post_tags': ['</mark>'],
        },
    }


def test_document_search_without_term_omits_query_text():
    query = build_document_search({'album': {'label': 'x'}})
    assert 'query' not in query['query']['multi_match']
    assert query['size'] == 10


@pytest.mark.parametrize('builder,params,options', [
    (build_artist_search, {'term': 'bird'}, None),
    (build_album_search, {'term': 'bird', 'album': {'rotation': 'heavy'}}, {'size': 3}),
    (build_track_search, {'track': {'duration_ms': {'gte': 1, 'lte': ''}, 'album': {'local': 'y'}}}, None),
    (build_document_search, {'term': 'bird'}, {'from': 1}),
])
def test_builders_are_idempotent(builder, params, options):
    assert builder(params, options) == builder(params, options)


def test_builders_return_independent_bodies():
    first = build_album_search({'album': {'label': 'x'}})
    first['query']['bool']['filter'].append({'match': {'foo': 'bar'}})

    assert build_album_search({'album': {'label': 'x'}})['query']['bool']['filter'] == [
        {'match_phrase': {'label': 'x'}},
    ]


def test_random_query_shape():
    query = build_random_query()
    assert query == {'query': {'function_score': {'random_score': {}}}}
    assert 'from' not in query and 'size' not in query
