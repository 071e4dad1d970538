from typing import Dict, Any, List, Optional

# etcd v2 error codes
KEY_NOT_FOUND = 100
TEST_FAILED = 101
NOT_FILE = 102
NOT_DIR = 104
NODE_EXIST = 105
ROOT_RONLY = 107
DIR_NOT_EMPTY = 108
UNAUTHORIZED = 110
PREV_VALUE_REQUIRED = 201
TTL_NAN = 202
INDEX_NAN = 203
INVALID_FIELD = 209
INVALID_FORM = 210
RAFT_INTERNAL = 300
LEADER_ELECT = 301
WATCHER_CLEARED = 400
EVENT_INDEX_CLEARED = 401

class BaseError(Exception):
    pass

class HttpError(BaseError):
    def __init__(self, origin: Exception, endpoint: Optional[str]=None) -> None:
        self.origin = origin
        self.endpoint = endpoint
        super(HttpError, self).__init__(
            '{}: {}'.format(endpoint or 'etcd', origin))

class ApiError(BaseError):
    error_code: int
    message: str
    cause: str
    index: int
    status: Optional[int]

    def __init__(self, error_code: int, message: str, cause: str='', index: int=0, status: Optional[int]=None) -> None:
        self.error_code = error_code
        self.message = message
        self.cause = cause
        self.index = index
        self.status = status
        super(ApiError, self).__init__(
            '{} ({}): {}'.format(message, error_code, cause)
            if cause else '{} ({})'.format(message, error_code))

    @classmethod
    def from_json(cls, body: Any, status: Optional[int]=None) -> 'ApiError':
        if not isinstance(body, dict):
            raise TypeError('api error body must be an object')
        message = body['message']
        if not isinstance(message, str):
            raise TypeError('invalid api error message')
        return cls(int(body.get('errorCode') or 0),
                   message,
                   cause=body.get('cause') or '',
                   index=int(body.get('index') or 0),
                   status=status)

    def as_json(self) -> Dict[str, Any]:
        return {
            'errorCode': self.error_code,
            'message': self.message,
            'cause': self.cause,
            'index': self.index,
        }

class SerializationError(BaseError):
    pass

class UnexpectedStatus(BaseError):
    def __init__(self, status: int) -> None:
        self.status = status
        super(UnexpectedStatus, self).__init__(
            'unexpected http status {}'.format(status))

class InvalidConditions(BaseError):
    def __init__(self) -> None:
        super(InvalidConditions, self).__init__(
            'current value or modified index is required')

class InvalidUri(BaseError, ValueError):
    pass

class ClusterError(BaseError):
    '''
    Raised when no endpoint could serve a request, errors keeps
    the failure of each endpoint in the order they were tried
    '''
    def __init__(self, errors: List[BaseError]) -> None:
        assert errors, 'errors should never be empty'
        self.errors = errors
        super(ClusterError, self).__init__(
            '; '.join(str(e) or e.__class__.__name__ for e in errors))

    @property
    def first(self) -> BaseError:
        return self.errors[0]

class WatchError(BaseError):
    pass

class WatchTimeout(WatchError):
    def __init__(self) -> None:
        super(WatchTimeout, self).__init__('watch timed out')

class WatchFailed(WatchError):
    def __init__(self, errors: List[BaseError]) -> None:
        self.errors = errors
        super(WatchFailed, self).__init__(
            '; '.join(str(e) or e.__class__.__name__ for e in errors))
