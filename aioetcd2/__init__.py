from .client import Client, ClientBuilder, Health, VersionInfo
from .config import ClientConfig
from .exceptions import (
    BaseError, HttpError, ApiError, SerializationError,
    UnexpectedStatus, InvalidConditions, InvalidUri,
    ClusterError, WatchError, WatchTimeout, WatchFailed)
from .response import ClusterInfo, Response
from .tls import Certificate, Identity

__version__ = '0.1.0'

__all__ = [
    'Client', 'ClientBuilder', 'ClientConfig',
    'Health', 'VersionInfo',
    'ClusterInfo', 'Response',
    'Certificate', 'Identity',
    'BaseError', 'HttpError', 'ApiError', 'SerializationError',
    'UnexpectedStatus', 'InvalidConditions', 'InvalidUri',
    'ClusterError', 'WatchError', 'WatchTimeout', 'WatchFailed',
]
