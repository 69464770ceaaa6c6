# utils/helpers.py
import re

# "track[album][rotation]" -> "track", "[album][rotation]"
_BRACKET_KEY = re.compile(r'^([^\[\]]+)((?:\[[^\[\]]*\])*)$')


def safe_strip(value):
    """Safely strip a string value, handling None"""
    if value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped if stripped else None
    return value


def parse_bool(value):
    """Interpret query-string booleans ('true', '1', 'yes'); other values pass through"""
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ('true', '1', 'yes'):
            return True
        if lowered in ('false', '0', 'no'):
            return False
    return value


def parse_nested_args(args, exclude=()):
    """
    Turn bracket-notation query args into nested dicts

    album[rotation]=heavy&track[album][local]=yes becomes
    {'album': {'rotation': 'heavy'}, 'track': {'album': {'local': 'yes'}}}

    Args:
        args: Iterable of (key, value) pairs, e.g. request.args.items(multi=True)
        exclude: Top-level keys to skip

    Returns:
        Nested dict; keys keep their first-seen order
    """
    result = {}
    for key, value in args:
        match = _BRACKET_KEY.match(key)
        if not match:
            continue

        path = [match.group(1)] + re.findall(r'\[([^\[\]]*)\]', match.group(2))
        if path[0] in exclude or any(part == '' for part in path):
            continue

        node = result
        for part in path[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[path[-1]] = value

    return result


def parse_int_arg(value, name, minimum=0, maximum=None):
    """
    Parse a non-negative integer argument

    Raises:
        ValueError: value is not an integer or is out of range
    """
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"'{name}' must be an integer") from None

    if number < minimum:
        raise ValueError(f"'{name}' must be >= {minimum}")
    if maximum is not None and number > maximum:
        raise ValueError(f"'{name}' must be <= {maximum}")
    return number
