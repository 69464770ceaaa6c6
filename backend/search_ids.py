"""
Search Document Identifiers

Derives the _id each record is stored under in the search indexes.
The same record always yields the same identifier, which is what lets
re-indexing and upserts overwrite a document instead of duplicating it.
"""

from typing import Any, Dict


def get_album_id(album: Dict[str, Any]) -> Any:
    """
    Get the underlying value of an album's album_id

    album_id may be a wrapper carrying the value (a dict with a 'value'
    key, or an object with a .value attribute) or the plain value itself.
    """
    album_id = album['album_id']
    if isinstance(album_id, dict):
        return album_id['value']
    return getattr(album_id, 'value', album_id)


def get_artist_id(artist: Dict[str, Any]) -> str:
    return str(artist['id'])


def get_document_id(document: Dict[str, Any], subject_id: Any) -> str:
    """A document attached to several subjects gets one identifier per subject"""
    return f"{document['id']}-{subject_id}"


def get_track_id(track: Dict[str, Any], album: Dict[str, Any]) -> str:
    """Track numbers are only unique within their album"""
    return f"{get_album_id(album)}-{track['track_num']}"
