import logging
import pytest
import sentry_sdk

from aioetcd2 import ClientBuilder, ClusterError
from aioetcd2 import keys
from aioetcd2.log import config_log
from aioetcd2.metrics import collect_metrics
from aioetcd2.sentry import setup_sentry

def lines_of(metrics, name):
    return {labels['endpoint']: v
            for n, labels, v in metrics['lines'] if n == name}

@pytest.mark.asyncio()
async def test_collect_metrics(etcd, unused_endpoint):
    await collect_metrics()

    dead = unused_endpoint()
    c = ClientBuilder([etcd.url]).build()
    async with c:
        await keys.set(c, '/test/foo', 'bar')
        await keys.get(c, '/test/foo')
        with pytest.raises(ClusterError):
            await keys.get(c, '/test/missing')

    c = ClientBuilder([dead]).build()
    async with c:
        with pytest.raises(ClusterError):
            await keys.get(c, '/test/foo')

    metrics = await collect_metrics()
    assert metrics['meta']['etcd_requests']['type'] == 'gauge'
    assert lines_of(metrics, 'etcd_requests') == {etcd.url: 3, dead: 1}
    assert lines_of(metrics, 'etcd_request_errors') == {etcd.url: 1, dead: 1}
    assert lines_of(metrics, 'etcd_slow_requests') == {}

    metrics = await collect_metrics()
    assert metrics['lines'] == []

@pytest.mark.asyncio()
async def test_failures_leave_breadcrumbs(unused_endpoint, monkeypatch):
    crumbs = []
    monkeypatch.setattr(sentry_sdk, 'add_breadcrumb',
                        lambda **kw: crumbs.append(kw))
    dead = unused_endpoint()
    c = ClientBuilder([dead]).build()
    async with c:
        with pytest.raises(ClusterError):
            await keys.get(c, '/test/foo')
    assert len(crumbs) == 1
    assert crumbs[0]['category'] == 'etcd'
    assert crumbs[0]['data']['error_type'] == 'HttpError'
    assert dead in crumbs[0]['message']

def test_setup_sentry_without_dsn(monkeypatch):
    monkeypatch.delenv('AIOETCD2_SENTRY_DSN', raising=False)
    assert setup_sentry() is False

def test_config_log(monkeypatch):
    root = logging.getLogger()
    old_level, old_handlers = root.level, root.handlers[:]
    try:
        monkeypatch.setenv('AIOETCD2_LOG_LEVEL', 'debug')
        monkeypatch.setenv('AIOETCD2_LOG_CONSOLE', 'yes')
        cfg = config_log()
        assert cfg['root']['level'] == 'DEBUG'
        assert cfg['root']['handlers'] == ['console']
        assert root.level == logging.DEBUG

        monkeypatch.setenv('AIOETCD2_LOG_CONSOLE', 'whatever')
        cfg = config_log(level='warning')
        assert cfg['root']['level'] == 'WARNING'
        assert cfg['root']['handlers'] == []
    finally:
        root.setLevel(old_level)
        root.handlers[:] = old_handlers
