#!/usr/bin/env python3
"""
Load a catalog export into the search indexes

Reads a JSON file shaped like:
    {
        "artists":   [{"id": 12, "name": ...}, ...],
        "albums":    [{"album_id": ..., "title": ..., "tracks": [{"track_num": 1, ...}]}],
        "documents": [{"id": ..., "subject_id": ..., "unsafe_text": ...}]
    }

Every record is keyed by its derived document identifier, so loading the
same export twice overwrites documents instead of duplicating them.
Tracks are indexed with their album embedded under 'album'.
"""

import json
from pathlib import Path

from script_base import ScriptBase, run_script

import search_service
from search_ids import get_album_id, get_artist_id, get_document_id, get_track_id


def track_document(track, album):
    """Track record with its album (minus the album's track list) embedded"""
    album_doc = {key: value for key, value in album.items() if key != 'tracks'}
    return {**track, 'album': track.get('album') or album_doc}


def plan_catalog(catalog):
    """
    Work out what to index from a catalog export

    Returns:
        List of (index, records, id_fn) tuples, one per index with records
    """
    albums = catalog.get('albums') or []
    tracks = [
        track_document(track, album)
        for album in albums
        for track in album.get('tracks') or []
    ]

    plan = [
        ('artist', catalog.get('artists') or [], get_artist_id),
        ('album', [{k: v for k, v in album.items() if k != 'tracks'} for album in albums], get_album_id),
        ('track', tracks, lambda track: get_track_id(track, track['album'])),
        ('document', catalog.get('documents') or [],
         lambda document: get_document_id(document, document['subject_id'])),
    ]
    return [(index, records, id_fn) for index, records, id_fn in plan if records]


def check_bulk_response(response):
    """Count failed items in a bulk response"""
    if not response or not response.get('errors'):
        return 0
    return sum(
        1 for item in response.get('items', [])
        if any('error' in result for result in item.values())
    )


def main():
    script = ScriptBase(
        name="load_catalog",
        description="Index a catalog JSON export into the search indexes",
        epilog="""
Examples:
  python load_catalog.py catalog.json
  python load_catalog.py catalog.json --upsert
  python load_catalog.py catalog.json --dry-run
        """
    )
    script.parser.add_argument('catalog', type=Path, help='Path to the catalog JSON file')
    script.parser.add_argument(
        '--upsert',
        action='store_true',
        help='Upsert records one by one (merge into existing documents) instead of bulk indexing'
    )
    script.add_dry_run_arg()
    script.add_debug_arg()

    args = script.parse_args()

    script.print_header({"DRY RUN": args.dry_run, "UPSERT": args.upsert})

    with open(args.catalog, encoding='utf-8') as f:
        catalog = json.load(f)

    stats = {'documents_written': 0, 'documents_failed': 0}

    for index, records, id_fn in plan_catalog(catalog):
        script.logger.info(f"{index}: {len(records)} records")

        if args.dry_run:
            for record in records[:5]:
                script.logger.info(f"  [DRY RUN] would write {index}/{id_fn(record)}")
            continue

        if args.upsert:
            for record in records:
                search_service.update(index, id_fn(record), record)
            stats['documents_written'] += len(records)
        else:
            response = search_service.bulk(search_service.build_bulk_actions(index, records, id_fn))
            failed = check_bulk_response(response)
            if failed:
                script.logger.warning(f"  {failed} {index} documents failed to index")
            stats['documents_failed'] += failed
            stats['documents_written'] += len(records) - failed

    if not args.dry_run:
        for index in ('artist', 'album', 'track', 'document'):
            stats[f'{index}_count'] = search_service.count(index)

    script.print_summary(stats)
    return stats['documents_failed'] == 0


if __name__ == "__main__":
    run_script(main)
