import base64
import logging
from collections import Counter
from itertools import permutations
import pytest

from aioetcd2 import (
    Client, ClientBuilder, Certificate, Health, VersionInfo, Response,
    ApiError, HttpError, ClusterError, InvalidUri, SerializationError)
from aioetcd2 import client as client_module
from aioetcd2 import keys
from aioetcd2.utils import shuffled

def test_builder_rejects_bad_endpoints():
    with pytest.raises(InvalidUri):
        ClientBuilder([])
    with pytest.raises(InvalidUri):
        ClientBuilder(['not a url'])
    with pytest.raises(InvalidUri):
        ClientBuilder(['ftp://127.0.0.1:2379'])
    with pytest.raises(InvalidUri):
        ClientBuilder(['http://127.0.0.1:notaport'])
    with pytest.raises(ValueError):
        Client([])

def test_endpoints_end_with_slash():
    c = ClientBuilder(['http://127.0.0.1:2379', 'https://etcd:2379/']).build()
    assert c.endpoints == ('http://127.0.0.1:2379/', 'https://etcd:2379/')

def test_builder_options():
    builder = (ClientBuilder(['http://127.0.0.1:2379'])
               .with_basic_auth('root', 'secret')
               .with_connect_timeout(5))
    assert builder.basic_auth == ('root', 'secret')
    assert builder.connect_timeout == 5
    with pytest.raises(ValueError):
        builder.with_connect_timeout(0)

    with pytest.raises(ValueError):
        Certificate.from_pem('garbage')
    with pytest.raises(ValueError):
        Certificate.from_der(b'')

def test_shuffle_fairness():
    items = ['a', 'b', 'c']
    counter = Counter(tuple(shuffled(items)) for _ in range(6000))
    assert set(counter) == set(permutations(items))
    for perm, count in counter.items():
        assert 800 < count < 1200, perm
    assert items == ['a', 'b', 'c']

@pytest.mark.asyncio()
async def test_all_endpoints_down(unused_endpoint):
    c = ClientBuilder([unused_endpoint(), unused_endpoint()]).build()
    try:
        with pytest.raises(ClusterError) as excinfo:
            await keys.get(c, '/test/foo')
    finally:
        await c.close()
    errors = excinfo.value.errors
    assert len(errors) == 2
    assert all(isinstance(e, HttpError) for e in errors)

@pytest.mark.asyncio()
async def test_first_ok_keeps_shuffle_order(unused_endpoint, monkeypatch):
    endpoints = [unused_endpoint() for _ in range(3)]
    monkeypatch.setattr(client_module, 'shuffled',
                        lambda items: list(reversed(items)))
    c = ClientBuilder(endpoints).build()
    try:
        with pytest.raises(ClusterError) as excinfo:
            await keys.get(c, '/test/foo')
    finally:
        await c.close()
    tried = [e.endpoint for e in excinfo.value.errors]
    assert tried == list(reversed(endpoints))

@pytest.mark.asyncio()
async def test_first_ok_stops_at_first_success(etcd_factory, monkeypatch):
    first = await etcd_factory('first')
    second = await etcd_factory('second')
    monkeypatch.setattr(client_module, 'shuffled', list)

    c = ClientBuilder([first.url, second.url]).build()
    try:
        await keys.set(c, '/test/foo', 'bar')
    finally:
        await c.close()
    assert len(first.requests) == 1
    assert second.requests == []

@pytest.mark.asyncio()
async def test_first_ok_fails_over(etcd, unused_endpoint, monkeypatch):
    monkeypatch.setattr(client_module, 'shuffled', list)
    c = ClientBuilder([unused_endpoint(), etcd.url]).build()
    try:
        resp = await keys.set(c, '/test/foo', 'bar')
    finally:
        await c.close()
    assert resp.data.node.value == 'bar'
    assert len(etcd.requests) == 1

@pytest.mark.asyncio()
async def test_first_ok_fails_over_on_error_status(etcd_factory, monkeypatch):
    broken = await etcd_factory('broken')
    broken.fail_status = 500
    healthy = await etcd_factory('healthy')
    monkeypatch.setattr(client_module, 'shuffled', list)

    c = ClientBuilder([broken.url, healthy.url]).build()
    try:
        resp = await keys.set(c, '/test/foo', 'bar')
    finally:
        await c.close()
    assert resp.data.node.value == 'bar'
    assert len(broken.requests) == 1
    assert len(healthy.requests) == 1

@pytest.mark.parametrize('body', [
    {'action': 'get', 'node': 'oops'},
    {'action': 'get', 'node': {'key': '/test', 'dir': True, 'nodes': ['oops']}},
    ['not', 'an', 'object'],
])
@pytest.mark.asyncio()
async def test_first_ok_fails_over_on_malformed_body(etcd_factory, monkeypatch, body):
    broken = await etcd_factory('broken')
    broken.bogus_body = body
    healthy = await etcd_factory('healthy')
    monkeypatch.setattr(client_module, 'shuffled', list)

    c = ClientBuilder([broken.url, healthy.url]).build()
    try:
        await keys.set(c, '/test/foo', 'bar')
        resp = await keys.get(c, '/test/foo')
    finally:
        await c.close()
    assert resp.data.node.value == 'bar'
    assert len(broken.requests) == 2

@pytest.mark.asyncio()
async def test_malformed_bodies_are_serialization_errors(etcd_factory):
    from aioetcd2 import auth, stats
    servers = [await etcd_factory(str(i)) for i in range(2)]
    servers[0].bogus_body = {'leader': 'x', 'followers': ['oops'],
                             'users': 'oops', 'roles': 'oops'}
    servers[1].bogus_body = 'oops'
    c = ClientBuilder([s.url for s in servers]).build()
    async with c:
        for call in (keys.get(c, '/test'), auth.get_users(c),
                     auth.get_roles(c)):
            with pytest.raises(ClusterError) as excinfo:
                await call
            assert len(excinfo.value.errors) == 2
            assert all(isinstance(e, SerializationError)
                       for e in excinfo.value.errors)

        with pytest.raises(SerializationError):
            await stats.leader_stats(c)

        results = await stats.store_stats(c)
        assert len(results) == 2
        assert all(isinstance(r, SerializationError) for r in results)

@pytest.mark.asyncio()
async def test_each_endpoint_tried_once(etcd_factory):
    servers = [await etcd_factory(str(i)) for i in range(3)]
    for s in servers:
        s.fail_status = 500
    c = ClientBuilder([s.url for s in servers]).build()
    try:
        with pytest.raises(ClusterError) as excinfo:
            await keys.get(c, '/test/foo')
    finally:
        await c.close()
    assert len(excinfo.value.errors) == 3
    assert all(isinstance(e, ApiError) and e.error_code == 300
               for e in excinfo.value.errors)
    assert [len(s.requests) for s in servers] == [1, 1, 1]

@pytest.mark.asyncio()
async def test_serialization_error(client):
    async def _get(client, endpoint):
        async with client.session.get(endpoint + 'version') as resp:
            return await client_module.parse_etcd_response(
                resp, lambda body: body['missing'])
    with pytest.raises(ClusterError) as excinfo:
        await client.first_ok(_get)
    assert isinstance(excinfo.value.errors[0], SerializationError)

@pytest.mark.asyncio()
async def test_broadcast_keeps_endpoint_order(etcd_factory, unused_endpoint):
    first = await etcd_factory('first')
    second = await etcd_factory('second')
    c = ClientBuilder([first.url, unused_endpoint(), second.url]).build()
    try:
        results = await c.health()
    finally:
        await c.close()
    assert len(results) == 3
    assert isinstance(results[0], Response)
    assert isinstance(results[1], HttpError)
    assert isinstance(results[2], Response)
    assert isinstance(results[0].data, Health)
    assert results[0].data.healthy
    # /health carries no cluster headers
    assert results[0].cluster_info.etcd_index is None

@pytest.mark.asyncio()
async def test_absent_cluster_headers_are_quiet(client, caplog):
    with caplog.at_level(logging.WARNING, logger='aioetcd2'):
        results = await client.health()
        await client.versions()
    assert results[0].data.healthy
    assert caplog.records == []

@pytest.mark.asyncio()
async def test_versions(client):
    results = await client.versions()
    assert len(results) == 1
    version = results[0].data
    assert isinstance(version, VersionInfo)
    assert version.cluster_version == '2.3.0'
    assert version.server_version == '2.3.8'

@pytest.mark.asyncio()
async def test_request_first_ok_raises_first_error(unused_endpoint):
    c = ClientBuilder([unused_endpoint(), unused_endpoint()]).build()
    try:
        with pytest.raises(HttpError):
            await c.request_first_ok('/v2/stats/leader')
    finally:
        await c.close()

@pytest.mark.asyncio()
async def test_basic_auth_header(etcd):
    c = ClientBuilder([etcd.url]).with_basic_auth('root', 'secret').build()
    async with c:
        await keys.set(c, '/test/foo', 'bar')
        await c.health()
    expected = 'Basic ' + base64.b64encode(b'root:secret').decode('ascii')
    assert etcd.auth_headers == [expected, expected]

@pytest.mark.asyncio()
async def test_no_auth_header_by_default(etcd, client):
    await keys.set(client, '/test/foo', 'bar')
    assert etcd.auth_headers == [None]

@pytest.mark.asyncio()
async def test_close_releases_session(client):
    await client.versions()
    session = client.session
    await client.close()
    assert session.closed

@pytest.mark.asyncio()
async def test_request_path_must_be_absolute(client, etcd):
    with pytest.raises(ValueError):
        await client.request_first_ok('v2/stats/leader')
    with pytest.raises(ValueError):
        await client.request_on_each_endpoint('version')
    assert etcd.requests == []
