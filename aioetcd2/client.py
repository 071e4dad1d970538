from typing import Dict, Any, List, Tuple, Union, Iterable, Optional, Callable, Awaitable
import logging
import time
import json
import ssl
import asyncio
import aiohttp

from .exceptions import (
    BaseError, HttpError, ApiError, SerializationError,
    ClusterError, InvalidUri)
from .response import ClusterInfo, Response
from .tls import Certificate, Identity, create_ssl_context
from .utils import normalize_endpoint, shuffled
from .metrics import (
    request_count, error_request_count,
    slow_request_count, SLOW_REQUEST_SECS)
from . import sentry

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 90.0

FORM_CONTENT_TYPE = 'application/x-www-form-urlencoded'
FORM_HEADERS = {'Content-Type': FORM_CONTENT_TYPE}

Decoder = Callable[[Any], Any]
StatusPredicate = Callable[[int], bool]
Handler = Callable[['Client', str], Awaitable[Any]]
BroadcastResult = Union[Response, BaseError]

def is_ok(status: int) -> bool:
    return status == 200

def is_ok_or_created(status: int) -> bool:
    return status in (200, 201)

def is_no_content(status: int) -> bool:
    return status == 204

def decode_json(body: bytes, decode: Decoder) -> Any:
    try:
        return decode(json.loads(body))
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise SerializationError(
            'cannot decode response body: {}'.format(e)) from e

def decode_api_error(body: bytes, status: int) -> BaseError:
    try:
        return ApiError.from_json(json.loads(body), status=status)
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        return SerializationError(
            'cannot decode api error of status {}: {}'.format(status, e))

async def parse_etcd_response(resp: aiohttp.ClientResponse,
                              decode: Decoder,
                              success: StatusPredicate=is_ok) -> Response:
    status = resp.status
    cluster_info = ClusterInfo.from_headers(resp.headers)
    body = await resp.read()
    if success(status):
        return Response(decode_json(body, decode), cluster_info)
    raise decode_api_error(body, status)

async def parse_empty_response(resp: aiohttp.ClientResponse,
                               success: StatusPredicate=is_no_content) -> Response:
    status = resp.status
    cluster_info = ClusterInfo.from_headers(resp.headers)
    body = await resp.read()
    if success(status):
        return Response(None, cluster_info)
    raise decode_api_error(body, status)

class Health:
    health: str

    def __init__(self, body: Dict[str, Any]) -> None:
        self.health = body['health']
        if not isinstance(self.health, str):
            raise TypeError('health should be a string')

    @property
    def healthy(self) -> bool:
        return self.health == 'true'

    def as_json(self) -> Dict[str, Any]:
        return {'health': self.health}

class VersionInfo:
    cluster_version: str
    server_version: str

    def __init__(self, body: Dict[str, Any]) -> None:
        self.cluster_version = body['etcdcluster']
        self.server_version = body['etcdserver']

    def as_json(self) -> Dict[str, Any]:
        return {
            'etcdcluster': self.cluster_version,
            'etcdserver': self.server_version,
        }

class Client:
    '''
    API client of an etcd cluster, every call is made against one of
    the endpoints until a member answers successfully.
    Build it with ClientBuilder.
    '''
    _session: Optional[aiohttp.ClientSession]

    def __init__(self,
                 endpoints: Iterable[str],
                 auth: Optional[aiohttp.BasicAuth]=None,
                 connect_timeout: float=DEFAULT_CONNECT_TIMEOUT,
                 ssl_context: Optional[ssl.SSLContext]=None) -> None:
        self._endpoints = parse_endpoints(endpoints)
        self._auth = auth
        self._timeout = aiohttp.ClientTimeout(
            total=None, sock_connect=connect_timeout)
        self._ssl_context = ssl_context
        self._session = None

    @property
    def endpoints(self) -> Tuple[str, ...]:
        return self._endpoints

    @property
    def session(self) -> aiohttp.ClientSession:
        # sessions are bound to the running loop, so create on first use
        if self._session is None or self._session.closed:
            if self._ssl_context is not None:
                conn = aiohttp.TCPConnector(ssl=self._ssl_context)
            else:
                conn = aiohttp.TCPConnector()
            self._session = aiohttp.ClientSession(
                connector=conn,
                auth=self._auth,
                timeout=self._timeout)
        return self._session

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> 'Client':
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _call(self, handler: Handler, endpoint: str, long_poll: bool=False) -> Any:
        request_count.incr(endpoint)
        req_start_time = time.time()
        try:
            try:
                return await handler(self, endpoint)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise HttpError(e, endpoint) from e
        except BaseError as e:
            error_request_count.incr(endpoint)
            sentry.endpoint_failed(endpoint, e)
            if isinstance(e, ApiError):
                logger.debug('etcd api error from %s: %s', endpoint, e)
            else:
                logger.warning('etcd endpoint %s failed: %s', endpoint, e)
            raise
        finally:
            used_time = time.time() - req_start_time
            if used_time > SLOW_REQUEST_SECS and not long_poll:
                slow_request_count.incr(endpoint)
                logger.warning(
                    'long etcd request, endpoint %s, used %s seconds',
                    endpoint, used_time)

    async def first_ok(self, handler: Handler, long_poll: bool=False) -> Any:
        '''
        Calls handler against the endpoints in random order, one at a time,
        and returns the first success. Raises ClusterError with the error of
        every endpoint when all of them fail.
        '''
        errors: List[BaseError] = []
        for endpoint in shuffled(self._endpoints):
            logger.debug('dispatching etcd request to %s', endpoint)
            try:
                return await self._call(handler, endpoint, long_poll=long_poll)
            except BaseError as e:
                errors.append(e)
        raise ClusterError(errors)

    async def broadcast(self, handler: Handler) -> List[BroadcastResult]:
        '''
        Calls handler against every endpoint in the configured order,
        failures are returned in place of the response
        '''
        results: List[BroadcastResult] = []
        for endpoint in self._endpoints:
            try:
                results.append(await self._call(handler, endpoint))
            except BaseError as e:
                results.append(e)
        return results

    async def request(self, url: str, decode: Decoder=dict) -> Response:
        async with self.session.get(url) as resp:
            return await parse_etcd_response(resp, decode)

    async def request_first_ok(self, path: str, decode: Decoder=dict) -> Response:
        if not path.startswith('/'):
            raise ValueError('path should start with /')

        async def _get(client: 'Client', endpoint: str) -> Response:
            return await client.request(build_url(endpoint, path), decode)
        try:
            return await self.first_ok(_get)
        except ClusterError as e:
            raise e.first

    async def request_on_each_endpoint(self, path: str, decode: Decoder=dict) -> List[BroadcastResult]:
        if not path.startswith('/'):
            raise ValueError('path should start with /')

        async def _get(client: 'Client', endpoint: str) -> Response:
            return await client.request(build_url(endpoint, path), decode)
        return await self.broadcast(_get)

    async def health(self) -> List[BroadcastResult]:
        "Runs a basic health check against each member"
        return await self.request_on_each_endpoint('/health', Health)

    async def versions(self) -> List[BroadcastResult]:
        "Returns version information from each member"
        return await self.request_on_each_endpoint('/version', VersionInfo)

    def __repr__(self) -> str:
        return 'Client({!r})'.format(list(self._endpoints))

def build_url(endpoint: str, path: str) -> str:
    return '{}{}'.format(endpoint, path.lstrip('/'))

def parse_endpoints(endpoints: Iterable[str]) -> Tuple[str, ...]:
    if isinstance(endpoints, str):
        endpoints = [endpoints]
    parsed = []
    for e in endpoints:
        endpoint = normalize_endpoint(e)
        if endpoint is None:
            raise InvalidUri('could not parse endpoint: {}'.format(e))
        parsed.append(endpoint)
    if not parsed:
        raise InvalidUri('no endpoints provided')
    return tuple(parsed)

class ClientBuilder:
    '''
    Builds a Client from the member endpoints, e.g.

        client = (ClientBuilder(['http://127.0.0.1:2379'])
                  .with_basic_auth('root', 'secret')
                  .build())
    '''
    def __init__(self, endpoints: Iterable[str]) -> None:
        self.endpoints = parse_endpoints(endpoints)
        self.basic_auth: Optional[Tuple[str, str]] = None
        self.connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
        self.identity: Optional[Identity] = None
        self.root_certificates: List[Certificate] = []
        self.ssl_context: Optional[ssl.SSLContext] = None

    @classmethod
    def from_config(cls, cfg: Any) -> 'ClientBuilder':
        from .config import ClientConfig
        if not isinstance(cfg, ClientConfig):
            cfg = ClientConfig.from_json(cfg)
        return cfg.builder()

    def with_basic_auth(self, username: str, password: str) -> 'ClientBuilder':
        self.basic_auth = (username, password)
        return self

    def with_connect_timeout(self, timeout: float) -> 'ClientBuilder':
        if timeout <= 0:
            raise ValueError('connect timeout should be positive')
        self.connect_timeout = timeout
        return self

    def with_client_identity(self, identity: Identity) -> 'ClientBuilder':
        self.identity = identity
        return self

    def with_root_certificate(self, cert: Certificate) -> 'ClientBuilder':
        self.root_certificates.append(cert)
        return self

    def with_ssl_context(self, ssl_context: ssl.SSLContext) -> 'ClientBuilder':
        self.ssl_context = ssl_context
        return self

    def build(self) -> Client:
        ssl_context = self.ssl_context
        if self.identity is not None or self.root_certificates:
            ssl_context = create_ssl_context(
                self.root_certificates, self.identity,
                ssl_context=ssl_context)

        auth = None
        if self.basic_auth is not None:
            username, password = self.basic_auth
            auth = aiohttp.BasicAuth(username, password, encoding='utf-8')

        return Client(self.endpoints,
                      auth=auth,
                      connect_timeout=self.connect_timeout,
                      ssl_context=ssl_context)
