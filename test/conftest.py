from typing import AsyncGenerator, Callable, Awaitable, List
import socket
import pytest
import pytest_asyncio
from aiohttp.test_utils import TestServer

from aioetcd2 import Client, ClientBuilder
from fake_etcd import FakeEtcd

@pytest.fixture
def unused_endpoint() -> Callable[[], str]:
    '''
    Returns a factory of endpoints nobody listens on
    '''
    def _endpoint() -> str:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind(('127.0.0.1', 0))
            port = s.getsockname()[1]
        return 'http://127.0.0.1:{}/'.format(port)
    return _endpoint

@pytest_asyncio.fixture
async def etcd_factory() -> AsyncGenerator[Callable[..., Awaitable[FakeEtcd]], None]:
    started: List[FakeEtcd] = []
    servers: List[TestServer] = []

    async def _start(name: str='default') -> FakeEtcd:
        fake = FakeEtcd(name)
        server = TestServer(fake.app())
        await server.start_server()
        fake.url = str(server.make_url('/'))
        started.append(fake)
        servers.append(server)
        return fake

    yield _start

    for fake in started:
        fake.close()
    for server in servers:
        await server.close()

@pytest_asyncio.fixture
async def etcd(etcd_factory) -> FakeEtcd:
    return await etcd_factory()

@pytest_asyncio.fixture
async def client(etcd) -> AsyncGenerator[Client, None]:
    c = ClientBuilder([etcd.url]).build()
    yield c
    await c.close()
