'''
etcd's key-value API.

A "node" is a key-value pair or a directory of nodes, "/foo" is a key
if it has a value but it is a directory if there are nodes beneath it,
such as "/foo/bar".
'''
from typing import Dict, Any, List, Optional, Iterator, AsyncIterator
from enum import Enum
from datetime import datetime
import logging
import asyncio
from dateutil.parser import isoparse

from .client import (
    Client, FORM_HEADERS, parse_etcd_response,
    is_ok, is_ok_or_created)
from .exceptions import (
    ApiError, ClusterError, InvalidConditions,
    WatchTimeout, WatchFailed, EVENT_INDEX_CLEARED)
from .options import ComparisonConditions, DeleteOptions, GetOptions, SetOptions
from .response import Response
from .utils import quote_key

logger = logging.getLogger(__name__)

class Action(Enum):
    COMPARE_AND_DELETE = 'compareAndDelete'
    COMPARE_AND_SWAP = 'compareAndSwap'
    CREATE = 'create'
    DELETE = 'delete'
    EXPIRE = 'expire'
    GET = 'get'
    SET = 'set'
    UPDATE = 'update'

class Node:
    key: Optional[str]
    value: Optional[str]
    dir: Optional[bool]
    created_index: Optional[int]
    modified_index: Optional[int]
    expiration: Optional[str]
    ttl: Optional[int]
    nodes: Optional[List['Node']]

    def __init__(self, body: Dict[str, Any]) -> None:
        self.body = body
        self._parse_body(body)

    def _parse_body(self, body: Dict[str, Any]) -> None:
        if not isinstance(body, dict):
            raise TypeError('node should be an object')
        self.key = body.get('key')
        self.value = body.get('value')
        self.dir = body.get('dir')
        self.created_index = body.get('createdIndex')
        self.modified_index = body.get('modifiedIndex')
        self.expiration = body.get('expiration')
        self.ttl = body.get('ttl')
        nodes = body.get('nodes')
        if nodes is None:
            self.nodes = None
        elif isinstance(nodes, list):
            self.nodes = [Node(n) for n in nodes]
        else:
            raise TypeError('invalid nodes')

        for name in ('created_index', 'modified_index', 'ttl'):
            v = getattr(self, name)
            if not (v is None or isinstance(v, int)):
                raise TypeError('invalid {}'.format(name))

    @property
    def is_dir(self) -> bool:
        return bool(self.dir)

    @property
    def children(self) -> List['Node']:
        return self.nodes or []

    @property
    def expiration_time(self) -> Optional[datetime]:
        if not self.expiration:
            return None
        return isoparse(self.expiration)

    def walk(self) -> Iterator['Node']:
        yield self
        for c in self.children:
            if c.key == self.key:
                continue
            for cc in c.walk():
                yield cc

    def as_json(self) -> Dict[str, Any]:
        return self.body

    def __repr__(self) -> str:
        return 'Node({!r})'.format(self.body)

class KeyValueInfo:
    action: Action
    node: Node
    prev_node: Optional[Node]

    def __init__(self, body: Dict[str, Any]) -> None:
        if not isinstance(body, dict):
            raise TypeError('response should be an object')
        self.body = body
        self.action = Action(body['action'])
        self.node = Node(body['node'])
        prev_node = body.get('prevNode')
        self.prev_node = Node(prev_node) if prev_node is not None else None

    def as_json(self) -> Dict[str, Any]:
        return self.body

    def __repr__(self) -> str:
        return 'KeyValueInfo({}, {!r})'.format(self.action.value, self.node)

class WatchOptions:
    '''
    index: return the first change at the index or greater, to watch
           changes that happened in the past
    recursive: watch all child keys as well
    timeout: seconds to wait for a change before WatchTimeout is raised
    '''
    def __init__(self,
                 index: Optional[int]=None,
                 recursive: bool=False,
                 timeout: Optional[float]=None) -> None:
        self.index = index
        self.recursive = recursive
        self.timeout = timeout

def build_url(endpoint: str, key: str, query: Optional[str]=None) -> str:
    if query:
        return '{}v2/keys{}?{}'.format(endpoint, quote_key(key), query)
    else:
        return '{}v2/keys{}'.format(endpoint, quote_key(key))

async def raw_get(client: Client, key: str, options: GetOptions) -> Response:
    query = options.to_query()

    async def _get(client: Client, endpoint: str) -> Response:
        url = build_url(endpoint, key, query)
        async with client.session.get(url) as resp:
            return await parse_etcd_response(resp, KeyValueInfo, is_ok)
    return await client.first_ok(_get, long_poll=options.wait)

async def raw_set(client: Client, key: str, options: SetOptions) -> Response:
    try:
        body = options.to_body()
    except InvalidConditions as e:
        raise ClusterError([e])
    method = options.method

    async def _set(client: Client, endpoint: str) -> Response:
        url = build_url(endpoint, key)
        async with client.session.request(
                method, url, data=body, headers=FORM_HEADERS) as resp:
            return await parse_etcd_response(
                resp, KeyValueInfo, is_ok_or_created)
    return await client.first_ok(_set)

async def raw_delete(client: Client, key: str, options: DeleteOptions) -> Response:
    try:
        query = options.to_query()
    except InvalidConditions as e:
        raise ClusterError([e])

    async def _delete(client: Client, endpoint: str) -> Response:
        url = build_url(endpoint, key, query)
        async with client.session.delete(url) as resp:
            return await parse_etcd_response(resp, KeyValueInfo, is_ok)
    return await client.first_ok(_delete)

async def get(client: Client, key: str,
              recursive: bool=False,
              sort: bool=False,
              strong_consistency: bool=False) -> Response:
    '''
    Gets the node of key, child nodes are included when recursive,
    sorted alphabetically when sort. strong_consistency makes the member
    synchronize with the quorum before answering.
    '''
    return await raw_get(client, key, GetOptions(
        recursive=recursive,
        sort=sort,
        strong_consistency=strong_consistency))

async def set(client: Client, key: str, value: str, ttl: Optional[int]=None) -> Response:
    "Sets the value of a key, replacing any previous value and ttl"
    return await raw_set(client, key, SetOptions(value=value, ttl=ttl))

async def create(client: Client, key: str, value: str, ttl: Optional[int]=None) -> Response:
    "Creates a key, fails if it already exists"
    return await raw_set(client, key, SetOptions(
        value=value, ttl=ttl, prev_exist=False))

async def update(client: Client, key: str, value: str, ttl: Optional[int]=None) -> Response:
    "Updates an existing key"
    return await raw_set(client, key, SetOptions(
        value=value, ttl=ttl, prev_exist=True))

async def refresh(client: Client, key: str, ttl: int) -> Response:
    '''
    Bumps the ttl of an existing key without notifying watchers
    '''
    return await raw_set(client, key, SetOptions(
        ttl=ttl, refresh=True, prev_exist=True))

async def create_dir(client: Client, key: str, ttl: Optional[int]=None) -> Response:
    return await raw_set(client, key, SetOptions(
        dir=True, prev_exist=False, ttl=ttl))

async def set_dir(client: Client, key: str, ttl: Optional[int]=None) -> Response:
    '''
    Sets the key to an empty directory. An existing key-value pair is
    replaced, an existing directory is not.
    '''
    return await raw_set(client, key, SetOptions(dir=True, ttl=ttl))

async def update_dir(client: Client, key: str, ttl: Optional[int]=None) -> Response:
    return await raw_set(client, key, SetOptions(
        dir=True, prev_exist=True, ttl=ttl))

async def create_in_order(client: Client, key: str, value: str, ttl: Optional[int]=None) -> Response:
    '''
    Creates a key-value pair beneath the directory key, named with a
    number larger than any of its siblings, e.g. "00000000000000000001"
    '''
    return await raw_set(client, key, SetOptions(
        value=value, ttl=ttl, create_in_order=True))

async def delete(client: Client, key: str, recursive: bool=False) -> Response:
    return await raw_delete(client, key, DeleteOptions(recursive=recursive))

async def delete_dir(client: Client, key: str) -> Response:
    "Deletes an empty directory"
    return await raw_delete(client, key, DeleteOptions(dir=True))

async def compare_and_swap(client: Client, key: str, value: str,
                           ttl: Optional[int]=None,
                           current_value: Optional[str]=None,
                           current_modified_index: Optional[int]=None) -> Response:
    '''
    Updates the key only if its current value and/or modified index
    match. At least one of them must be given.
    '''
    return await raw_set(client, key, SetOptions(
        value=value,
        ttl=ttl,
        conditions=ComparisonConditions(
            value=current_value,
            modified_index=current_modified_index)))

async def compare_and_delete(client: Client, key: str,
                             current_value: Optional[str]=None,
                             current_modified_index: Optional[int]=None) -> Response:
    return await raw_delete(client, key, DeleteOptions(
        conditions=ComparisonConditions(
            value=current_value,
            modified_index=current_modified_index)))

async def watch(client: Client, key: str, options: Optional[WatchOptions]=None) -> Response:
    '''
    Waits for a change of the node and returns it.

    Raises WatchTimeout when options.timeout lapses. Any other failure is
    raised as WatchFailed, when options.index has been cleared out of
    etcd's event history the errors hold an ApiError with code
    EVENT_INDEX_CLEARED, and the key should be read again to get a newer
    index.
    '''
    if options is None:
        options = WatchOptions()

    fut = raw_get(client, key, GetOptions(
        recursive=options.recursive,
        wait=True,
        wait_index=options.index))

    try:
        if options.timeout is None:
            return await fut
        return await asyncio.wait_for(fut, timeout=options.timeout)
    except asyncio.TimeoutError:
        logger.debug('timeout watching %s', key)
        raise WatchTimeout() from None
    except ClusterError as e:
        raise WatchFailed(e.errors) from e

async def changes(client: Client, key: str,
                  recursive: bool=False,
                  index: Optional[int]=None,
                  timeout: Optional[float]=None) -> AsyncIterator[Response]:
    '''
    Yields the changes of key one by one, starting from index. Each
    watch is bounded by timeout, after which it is started over.
    '''
    next_index = index
    while True:
        logger.debug('watching %s from index %s', key, next_index)
        try:
            chg = await watch(client, key, WatchOptions(
                index=next_index,
                recursive=recursive,
                timeout=timeout))
        except WatchTimeout:
            continue
        except WatchFailed as e:
            cleared = [err for err in e.errors
                       if isinstance(err, ApiError) and
                       err.error_code == EVENT_INDEX_CLEARED]
            if not cleared:
                raise
            logger.debug('etcd event index cleared, restart from %s',
                         cleared[0].index + 1)
            next_index = cleared[0].index + 1
            continue
        modified_index = chg.data.node.modified_index
        if modified_index is not None:
            next_index = modified_index + 1
        yield chg
