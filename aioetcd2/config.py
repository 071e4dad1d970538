from typing import Dict, Any, List, Union, Optional
import json
import re

from .exceptions import InvalidUri
from .client import ClientBuilder, DEFAULT_CONNECT_TIMEOUT
from .tls import Certificate, Identity

EtcdHosts = Union[List[str], Dict[str, Any]]

class ClientConfig:
    '''
    Client settings loaded from a json document like

        {"etcd": ["10.0.0.1:2379", "10.0.0.2:2379"],
         "username": "root", "password": "secret"}

    etcd may also be {"protocol": "https", "host": [...]}
    '''
    endpoints: List[str]
    username: Optional[str] = None
    password: Optional[str] = None
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    ca_file: Optional[str] = None
    cert_file: Optional[str] = None
    key_file: Optional[str] = None

    def __init__(self, kw: Dict[str, Any]) -> None:
        self.endpoints = self.parse_hosts(kw['etcd'])
        self.username = kw.get('username')
        self.password = kw.get('password')
        self.connect_timeout = float(
            kw.get('connect_timeout', DEFAULT_CONNECT_TIMEOUT))
        self.ca_file = kw.get('ca_file')
        self.cert_file = kw.get('cert_file')
        self.key_file = kw.get('key_file')
        self.validate()

    @classmethod
    def from_json(cls, data: Union[str, bytes, Dict[str, Any]]) -> 'ClientConfig':
        if isinstance(data, (str, bytes)):
            data = json.loads(data)
        if not isinstance(data, dict):
            raise ValueError('config should be an object')
        return cls(data)

    @classmethod
    def load(cls, path: str) -> 'ClientConfig':
        with open(path, 'r', encoding='utf-8') as f:
            return cls(json.load(f))

    @staticmethod
    def parse_hosts(etcd_list: EtcdHosts) -> List[str]:
        protocol = 'http'
        if isinstance(etcd_list, dict):
            protocol = etcd_list.get('protocol', 'http')
            etcd_list = etcd_list['host']
        if isinstance(etcd_list, str):
            etcd_list = [etcd_list]

        endpoints = []
        for e in etcd_list:
            if re.match(r'https?://', e):
                endpoints.append(e)
            else:
                endpoints.append('{}://{}'.format(protocol, e))
        return endpoints

    def validate(self) -> None:
        if not self.endpoints:
            raise InvalidUri('no endpoints provided')
        if (self.username is None) != (self.password is None):
            raise ValueError('username and password go together')
        if self.connect_timeout <= 0:
            raise ValueError('connect_timeout should be positive')
        if self.key_file and not self.cert_file:
            raise ValueError('key_file requires cert_file')

    def builder(self) -> ClientBuilder:
        builder = ClientBuilder(self.endpoints)
        builder.with_connect_timeout(self.connect_timeout)
        if self.username is not None and self.password is not None:
            builder.with_basic_auth(self.username, self.password)
        if self.ca_file:
            with open(self.ca_file, 'rb') as f:
                data = f.read()
            if b'-----BEGIN CERTIFICATE-----' in data:
                builder.with_root_certificate(Certificate.from_pem(data))
            else:
                builder.with_root_certificate(Certificate.from_der(data))
        if self.cert_file:
            builder.with_client_identity(
                Identity(self.cert_file, self.key_file))
        return builder
