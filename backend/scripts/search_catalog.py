#!/usr/bin/env python3
"""
Search the catalog indexes from the command line

Runs the same search the API runs and logs counts and the top hits for
each index searched.
"""

from script_base import ScriptBase, run_script

import search_service
from search_service import MultiSearchResult


def parse_filter_args(filters):
    """
    Parse --filter values into nested search params

    Each value is a dotted path and a value, e.g.
        album.rotation=heavy
        track.album.local=yes
        track.duration_ms.gte=120000

    Returns:
        Nested dict of params

    Raises:
        ValueError: a filter is not of the form path=value
    """
    params = {}
    for item in filters or []:
        path, sep, value = item.partition('=')
        parts = path.split('.')
        if not sep or len(parts) < 2 or any(not part for part in parts):
            raise ValueError(f"Invalid filter '{item}' (expected section.field=value)")

        node = params
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = value
    return params


def describe_hit(hit):
    """Short one-line description of a raw hit"""
    source = hit.get('_source', {})
    label = source.get('title') or source.get('name') or (source.get('unsafe_text') or '')[:60]
    return f"{hit.get('_id')} (score {hit.get('_score')}): {label}"


def main():
    script = ScriptBase(
        name="search_catalog",
        description="Search the artist/album/track/document indexes",
        epilog="""
Examples:
  python search_catalog.py --term "blue train"
  python search_catalog.py --type album --filter album.rotation=heavy
  python search_catalog.py --type track --filter track.duration_ms.gte=120000 --size 20
  python search_catalog.py                     # random sample of every index
        """
    )
    script.parser.add_argument('--term', help='Free text to search for')
    script.parser.add_argument(
        '--filter',
        action='append',
        default=[],
        help='Filter as section.field=value (repeatable)'
    )
    script.parser.add_argument(
        '--show',
        type=int,
        default=3,
        help='Number of hits to print per index (default: 3)'
    )
    script.add_type_arg()
    script.add_pagination_args()
    script.add_debug_arg()

    args = script.parse_args()

    try:
        params = parse_filter_args(args.filter)
    except ValueError as e:
        script.logger.error(str(e))
        return False
    if args.term:
        params['term'] = args.term

    options = {}
    if args.from_ is not None:
        options['from'] = args.from_
    if args.size is not None:
        options['size'] = args.size

    script.print_header({"RANDOM SAMPLE": not params})
    script.print_section("Search", {'type': args.type, 'params': params, 'options': options or None})

    results = search_service.search(params, args.type, options or None)

    if isinstance(results, MultiSearchResult):
        envelopes = results.to_dict()
    else:
        envelopes = {args.type: results}

    for name, envelope in envelopes.items():
        script.logger.info("")
        script.logger.info(f"{name}: {envelope['count']} total")
        for hit in envelope['hits'][:args.show]:
            script.logger.info(f"  {describe_hit(hit)}")

    script.print_summary({name: envelope['count'] for name, envelope in envelopes.items()})
    return True


if __name__ == "__main__":
    run_script(main)
