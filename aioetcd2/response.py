from typing import Dict, Any, Optional, Mapping, Generic, TypeVar
import logging

logger = logging.getLogger(__name__)

XETCD_CLUSTER_ID = 'X-Etcd-Cluster-Id'
XETCD_INDEX = 'X-Etcd-Index'
XRAFT_INDEX = 'X-Raft-Index'
XRAFT_TERM = 'X-Raft-Term'

T = TypeVar('T')

MAX_U64 = 2 ** 64 - 1

def _header_index(headers: Mapping[str, str], name: str) -> Optional[int]:
    # an absent header is normal on /health, /version and the like
    v = headers.get(name)
    if v is None:
        return None
    v = v.strip()
    if not (v.isascii() and v.isdigit()):
        logger.warning('%s header decode error: not a decimal integer %r',
                       name, v)
        return None
    index = int(v)
    if index > MAX_U64:
        logger.warning('%s header decode error: out of range %s',
                       name, v)
        return None
    return index

class ClusterInfo:
    '''
    State of the etcd cluster as reported by the headers of a response
    '''
    cluster_id: Optional[str]
    etcd_index: Optional[int]
    raft_index: Optional[int]
    raft_term: Optional[int]

    def __init__(self,
                 cluster_id: Optional[str]=None,
                 etcd_index: Optional[int]=None,
                 raft_index: Optional[int]=None,
                 raft_term: Optional[int]=None) -> None:
        self.cluster_id = cluster_id
        self.etcd_index = etcd_index
        self.raft_index = raft_index
        self.raft_term = raft_term

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> 'ClusterInfo':
        return cls(cluster_id=headers.get(XETCD_CLUSTER_ID),
                   etcd_index=_header_index(headers, XETCD_INDEX),
                   raft_index=_header_index(headers, XRAFT_INDEX),
                   raft_term=_header_index(headers, XRAFT_TERM))

    def as_json(self) -> Dict[str, Any]:
        return {
            'cluster_id': self.cluster_id,
            'etcd_index': self.etcd_index,
            'raft_index': self.raft_index,
            'raft_term': self.raft_term,
        }

    def __eq__(self, other: Any) -> bool:
        return (isinstance(other, ClusterInfo) and
                self.as_json() == other.as_json())

    def __repr__(self) -> str:
        return 'ClusterInfo({cluster_id!r}, etcd_index={etcd_index}, raft_index={raft_index}, raft_term={raft_term})'.format(**self.as_json())

class Response(Generic[T]):
    '''
    Decoded payload of an API call together with the cluster info
    '''
    def __init__(self, data: T, cluster_info: ClusterInfo) -> None:
        self.data = data
        self.cluster_info = cluster_info

    def __repr__(self) -> str:
        return 'Response({!r}, {!r})'.format(self.data, self.cluster_info)
