from typing import Dict, Any, List, Tuple
import asyncio
from collections import defaultdict

MEntry = Tuple[Dict[str, Any], float]

SLOW_REQUEST_SECS = 2.0

class IMetricsEntry:
    name: str = ''
    help: str = ''
    type: str = 'gauge'
    field_name: str = ''

    async def collect(self) -> List[MEntry]:
        raise NotImplementedError

_metrics: List[IMetricsEntry] = []

def add_metrics(entry: IMetricsEntry) -> None:
    assert getattr(entry, 'name', None)
    assert getattr(entry, 'help', None)
    assert getattr(entry, 'type', None)
    _metrics.append(entry)

async def collect_metrics() -> Dict[str, Any]:
    results = await asyncio.gather(
        *[entry.collect() for entry in _metrics])

    meta = {}
    lines = []
    for entry, res in zip(_metrics, results):
        meta[entry.name] = {
            'help': entry.help,
            'type': entry.type
        }
        for labels, v in res:
            lines.append((entry.name, labels, v))
    return {
        'meta': meta,
        'lines': lines
        }

class EndpointCount(IMetricsEntry):
    field_name = 'endpoint'

    def __init__(self, name: str, help: str='') -> None:
        self.name = name
        if not help:
            self.help = self.name.replace('_', ' ')
        else:
            self.help = help
        self.values: Dict[str, float] = defaultdict(float)

    def incr(self, endpoint: str, v: float=1) -> None:
        self.values[endpoint] += v

    async def collect(self) -> List[MEntry]:
        arr: List[MEntry] = [({self.field_name: k}, v)
                             for k, v in self.values.items()]
        # clear old value
        self.values = defaultdict(float)
        return arr

request_count = EndpointCount(
    'etcd_requests',
    help='etcd request count since last time')
add_metrics(request_count)

error_request_count = EndpointCount(
    'etcd_request_errors',
    help='Failed etcd request count since last time')
add_metrics(error_request_count)

slow_request_count = EndpointCount(
    'etcd_slow_requests',
    help='Slow etcd request count since last time')
add_metrics(slow_request_count)
