'''
etcd's statistics API.
'''
from typing import Dict, Any, List, Optional

from .client import Client, BroadcastResult
from .response import Response

class CountStats:
    fail: int
    success: int

    def __init__(self, body: Dict[str, Any]) -> None:
        self.fail = body['fail']
        self.success = body['success']

class LatencyStats:
    average: float
    current: float
    maximum: float
    minimum: float
    standard_deviation: float

    def __init__(self, body: Dict[str, Any]) -> None:
        self.average = body['average']
        self.current = body['current']
        self.maximum = body['maximum']
        self.minimum = body['minimum']
        self.standard_deviation = body['standardDeviation']

class FollowerStats:
    "Raft statistics of a follower, as seen by the leader"
    counts: CountStats
    latency: LatencyStats

    def __init__(self, body: Dict[str, Any]) -> None:
        self.counts = CountStats(body['counts'])
        self.latency = LatencyStats(body['latency'])

class LeaderStats:
    leader: str
    followers: Dict[str, FollowerStats]

    def __init__(self, body: Dict[str, Any]) -> None:
        self.leader = body['leader']
        self.followers = {
            member_id: FollowerStats(v)
            for member_id, v in (body.get('followers') or {}).items()}

class LeaderInfo:
    leader: str
    uptime: str
    start_time: str

    def __init__(self, body: Dict[str, Any]) -> None:
        self.leader = body['leader']
        self.uptime = body['uptime']
        self.start_time = body['startTime']

class SelfStats:
    id: str
    name: str
    leader_info: LeaderInfo
    recv_append_request_cnt: int
    recv_bandwidth_rate: Optional[float]
    recv_pkg_rate: Optional[float]
    send_append_request_cnt: int
    send_bandwidth_rate: Optional[float]
    send_pkg_rate: Optional[float]
    start_time: str
    state: str

    def __init__(self, body: Dict[str, Any]) -> None:
        self.id = body['id']
        self.name = body['name']
        self.leader_info = LeaderInfo(body['leaderInfo'])
        self.recv_append_request_cnt = body['recvAppendRequestCnt']
        self.recv_bandwidth_rate = body.get('recvBandwidthRate')
        self.recv_pkg_rate = body.get('recvPkgRate')
        self.send_append_request_cnt = body['sendAppendRequestCnt']
        self.send_bandwidth_rate = body.get('sendBandwidthRate')
        self.send_pkg_rate = body.get('sendPkgRate')
        self.start_time = body['startTime']
        self.state = body['state']

class StoreStats:
    fields = [
        ('compare_and_swap_fail', 'compareAndSwapFail'),
        ('compare_and_swap_success', 'compareAndSwapSuccess'),
        ('create_fail', 'createFail'),
        ('create_success', 'createSuccess'),
        ('delete_fail', 'deleteFail'),
        ('delete_success', 'deleteSuccess'),
        ('expire_count', 'expireCount'),
        ('get_fail', 'getsFail'),
        ('get_success', 'getsSuccess'),
        ('set_fail', 'setsFail'),
        ('set_success', 'setsSuccess'),
        ('update_fail', 'updateFail'),
        ('update_success', 'updateSuccess'),
        ('watchers', 'watchers'),
    ]

    def __init__(self, body: Dict[str, Any]) -> None:
        for attr, name in self.fields:
            v = body[name]
            if not isinstance(v, int):
                raise TypeError('{} should be an integer'.format(name))
            setattr(self, attr, v)

    def as_json(self) -> Dict[str, int]:
        return {name: getattr(self, attr)
                for attr, name in self.fields}

async def leader_stats(client: Client) -> Response:
    "Only the leader has statistics of its followers"
    return await client.request_first_ok('/v2/stats/leader', LeaderStats)

async def self_stats(client: Client) -> List[BroadcastResult]:
    return await client.request_on_each_endpoint('/v2/stats/self', SelfStats)

async def store_stats(client: Client) -> List[BroadcastResult]:
    return await client.request_on_each_endpoint('/v2/stats/store', StoreStats)
