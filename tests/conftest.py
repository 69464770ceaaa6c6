"""Shared fixtures: a recording stand-in for the OpenSearch client."""

import copy

import pytest

import search_client


def make_response(hits=None, total=None):
    """Engine-shaped search response"""
    hits = hits or []
    return {
        'took': 1,
        'timed_out': False,
        'hits': {
            'total': {'value': len(hits) if total is None else total, 'relation': 'eq'},
            'max_score': 1.0 if hits else None,
            'hits': hits,
        },
    }


def make_hit(doc_id, index, **source):
    return {'_index': index, '_id': doc_id, '_score': 1.0, '_source': source}


class FakeSearchClient:
    """Records every call and answers from canned responses"""

    def __init__(self):
        self.calls = []
        self.msearch_response = {'responses': [make_response() for _ in range(4)]}
        self.search_response = make_response()
        self.count_responses = {}
        self.error = None
        self.ping_result = True
        self.closed = False

    def _record(self, method, **kwargs):
        self.calls.append((method, copy.deepcopy(kwargs)))
        if self.error is not None:
            raise self.error

    def msearch(self, body=None, **kwargs):
        self._record('msearch', body=body, **kwargs)
        return self.msearch_response

    def search(self, index=None, body=None, **kwargs):
        self._record('search', index=index, body=body, **kwargs)
        return self.search_response

    def bulk(self, body=None, **kwargs):
        self._record('bulk', body=body, **kwargs)
        return {'errors': False, 'items': []}

    def count(self, index=None, **kwargs):
        self._record('count', index=index, **kwargs)
        return {'count': self.count_responses.get(index, 0)}

    def update(self, index=None, id=None, body=None, **kwargs):
        self._record('update', index=index, id=id, body=body, **kwargs)
        return {'result': 'updated', '_id': id}

    def ping(self):
        return self.ping_result

    def close(self):
        self.closed = True


@pytest.fixture
def fake_client(monkeypatch):
    client = FakeSearchClient()
    monkeypatch.setattr(search_client, '_client', client)
    return client
