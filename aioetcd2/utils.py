from typing import Any, Optional
import random
from json import (
    dumps as json_dumps,
)
from urllib.parse import quote, urlsplit

def semanticbool(v: str) -> bool:
    if v.lower() in ('yes', 'true', 'ok', 'on', '1', 'y'):
        return True
    elif v.lower() in ('no', 'false', 'off', '0', 'n'):
        return False
    else:
        raise ValueError(v)

def json_to_str(v: Any) -> str:
    return json_dumps(v, sort_keys=True)

def normalize_endpoint(endpoint: str) -> Optional[str]:
    '''
    Returns the endpoint with a trailing slash, or None if it is
    not an absolute http(s) url
    '''
    try:
        parts = urlsplit(endpoint)
        # port is validated lazily by urllib
        parts.port
    except ValueError:
        return None
    if parts.scheme not in ('http', 'https') or not parts.hostname:
        return None
    if parts.query or parts.fragment:
        return None
    if not endpoint.endswith('/'):
        endpoint += '/'
    return endpoint

def quote_key(key: str) -> str:
    if not key.startswith('/'):
        key = '/' + key
    return quote(key, safe='/')

def shuffled(items: Any) -> list:
    # a fresh generator per call is seeded from os.urandom
    arr = list(items)
    random.Random().shuffle(arr)
    return arr
