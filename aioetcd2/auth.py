'''
etcd's authentication and authorization API, used to manage
users and roles.
'''
from typing import Dict, Any, List, Optional
from enum import Enum
from urllib.parse import quote

from .client import (
    Client, FORM_HEADERS,
    parse_etcd_response, parse_empty_response,
    is_ok, is_ok_or_created)
from .exceptions import UnexpectedStatus
from .response import ClusterInfo, Response
from .utils import json_to_str

class AuthChange(Enum):
    # the auth system was enabled or disabled
    CHANGED = 'changed'
    # the auth system was already in the desired state
    UNCHANGED = 'unchanged'

def _str_list(v: Any) -> List[str]:
    if not isinstance(v, list) or not all(isinstance(s, str) for s in v):
        raise TypeError('expect a list of strings')
    return v

class Permission:
    '''
    Keys allowed to be read or written, None means no change
    '''
    def __init__(self, read: Optional[List[str]]=None, write: Optional[List[str]]=None) -> None:
        self.read = read
        self.write = write

    @classmethod
    def from_json(cls, body: Dict[str, Any]) -> 'Permission':
        read = body.get('read')
        write = body.get('write')
        return cls(read=_str_list(read) if read is not None else None,
                   write=_str_list(write) if write is not None else None)

    def add_read(self, key: str) -> None:
        if self.read is None:
            self.read = []
        self.read.append(key)

    def add_write(self, key: str) -> None:
        if self.write is None:
            self.write = []
        self.write.append(key)

    def as_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.read is not None:
            data['read'] = self.read
        if self.write is not None:
            data['write'] = self.write
        return data

class Permissions:
    kv: Permission

    def __init__(self, kv: Optional[Permission]=None) -> None:
        self.kv = kv or Permission()

    @classmethod
    def from_json(cls, body: Optional[Dict[str, Any]]) -> 'Permissions':
        if not body or body.get('kv') is None:
            return cls()
        return cls(Permission.from_json(body['kv']))

    def as_json(self) -> Dict[str, Any]:
        return {'kv': self.kv.as_json()}

class Role:
    name: str
    permissions: Permissions

    def __init__(self, name: str, permissions: Optional[Permissions]=None) -> None:
        self.name = name
        self.permissions = permissions or Permissions()

    @classmethod
    def from_json(cls, body: Dict[str, Any]) -> 'Role':
        name = body['role']
        if not isinstance(name, str):
            raise TypeError('invalid role name')
        return cls(name, Permissions.from_json(body.get('permissions')))

    def grant_kv_read_permission(self, key: str) -> None:
        self.permissions.kv.add_read(key)

    def grant_kv_write_permission(self, key: str) -> None:
        self.permissions.kv.add_write(key)

    @property
    def kv_read_permissions(self) -> List[str]:
        return self.permissions.kv.read or []

    @property
    def kv_write_permissions(self) -> List[str]:
        return self.permissions.kv.write or []

    def as_json(self) -> Dict[str, Any]:
        return {
            'role': self.name,
            'permissions': self.permissions.as_json(),
        }

    def __repr__(self) -> str:
        return 'Role({!r})'.format(self.name)

class RoleUpdate:
    '''
    Permissions to be granted to and revoked from an existing role
    '''
    grants: Optional[Permissions] = None
    revocations: Optional[Permissions] = None

    def __init__(self, name: str) -> None:
        self.name = name

    def _grants(self) -> Permissions:
        if self.grants is None:
            self.grants = Permissions()
        return self.grants

    def _revocations(self) -> Permissions:
        if self.revocations is None:
            self.revocations = Permissions()
        return self.revocations

    def grant_kv_read_permission(self, key: str) -> None:
        self._grants().kv.add_read(key)

    def grant_kv_write_permission(self, key: str) -> None:
        self._grants().kv.add_write(key)

    def revoke_kv_read_permission(self, key: str) -> None:
        self._revocations().kv.add_read(key)

    def revoke_kv_write_permission(self, key: str) -> None:
        self._revocations().kv.add_write(key)

    def as_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'role': self.name}
        if self.grants is not None:
            data['grant'] = self.grants.as_json()
        if self.revocations is not None:
            data['revoke'] = self.revocations.as_json()
        return data

class User:
    "A user with the names of its roles"
    name: str
    role_names: List[str]

    def __init__(self, body: Dict[str, Any]) -> None:
        self.name = body['user']
        if not isinstance(self.name, str):
            raise TypeError('invalid user name')
        self.role_names = _str_list(body.get('roles') or [])

    def __repr__(self) -> str:
        return 'User({!r}, {!r})'.format(self.name, self.role_names)

class UserDetail:
    "A user with the full records of its roles"
    name: str
    roles: List[Role]

    def __init__(self, body: Dict[str, Any]) -> None:
        self.name = body['user']
        if not isinstance(self.name, str):
            raise TypeError('invalid user name')
        self.roles = [Role.from_json(r) for r in body.get('roles') or []]

    @property
    def role_names(self) -> List[str]:
        return [r.name for r in self.roles]

    def __repr__(self) -> str:
        return 'UserDetail({!r}, {!r})'.format(self.name, self.role_names)

class NewUser:
    roles: Optional[List[str]] = None

    def __init__(self, name: str, password: str) -> None:
        if not name:
            raise ValueError('user name is required')
        if not password:
            raise ValueError('password is required')
        self.name = name
        self.password = password

    def add_role(self, role: str) -> None:
        if self.roles is None:
            self.roles = []
        self.roles.append(role)

    def as_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'user': self.name,
            'password': self.password,
        }
        if self.roles is not None:
            data['roles'] = self.roles
        return data

class UserUpdate:
    password: Optional[str] = None
    grants: Optional[List[str]] = None
    revocations: Optional[List[str]] = None

    def __init__(self, name: str) -> None:
        self.name = name

    def update_password(self, password: str) -> None:
        self.password = password

    def grant_role(self, role: str) -> None:
        if self.grants is None:
            self.grants = []
        self.grants.append(role)

    def revoke_role(self, role: str) -> None:
        if self.revocations is None:
            self.revocations = []
        self.revocations.append(role)

    def as_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'user': self.name}
        if self.password is not None:
            data['password'] = self.password
        if self.grants is not None:
            data['grant'] = self.grants
        if self.revocations is not None:
            data['revoke'] = self.revocations
        return data

def build_url(endpoint: str, path: str) -> str:
    return '{}v2/auth{}'.format(endpoint, path)

def _user_path(name: str) -> str:
    return '/users/{}'.format(quote(name, safe=''))

def _role_path(name: str) -> str:
    return '/roles/{}'.format(quote(name, safe=''))

def _users(body: Dict[str, Any]) -> List[UserDetail]:
    return [UserDetail(u) for u in body.get('users') or []]

def _roles(body: Dict[str, Any]) -> List[Role]:
    return [Role.from_json(r) for r in body.get('roles') or []]

def _auth_status(body: Dict[str, Any]) -> bool:
    enabled = body['enabled']
    if not isinstance(enabled, bool):
        raise TypeError('enabled should be a bool')
    return enabled

def parse_auth_change(status: int, headers: Any) -> Response:
    cluster_info = ClusterInfo.from_headers(headers)
    if status == 200:
        return Response(AuthChange.CHANGED, cluster_info)
    elif status == 409:
        return Response(AuthChange.UNCHANGED, cluster_info)
    raise UnexpectedStatus(status)

async def _get(client: Client, path: str, decode: Any) -> Response:
    async def _request(client: Client, endpoint: str) -> Response:
        async with client.session.get(build_url(endpoint, path)) as resp:
            return await parse_etcd_response(resp, decode, is_ok)
    return await client.first_ok(_request)

async def _put(client: Client, path: str, body: Dict[str, Any], decode: Any) -> Response:
    data = json_to_str(body)

    async def _request(client: Client, endpoint: str) -> Response:
        # etcd reads the json body whatever the content type is
        async with client.session.put(
                build_url(endpoint, path),
                data=data,
                headers=FORM_HEADERS) as resp:
            return await parse_etcd_response(resp, decode, is_ok_or_created)
    return await client.first_ok(_request)

async def _delete(client: Client, path: str) -> Response:
    async def _request(client: Client, endpoint: str) -> Response:
        async with client.session.delete(build_url(endpoint, path)) as resp:
            return await parse_empty_response(
                resp, lambda s: s in (200, 204))
    return await client.first_ok(_request)

async def _change(client: Client, method: str) -> Response:
    async def _request(client: Client, endpoint: str) -> Response:
        async with client.session.request(
                method, build_url(endpoint, '/enable')) as resp:
            await resp.read()
            return parse_auth_change(resp.status, resp.headers)
    return await client.first_ok(_request)

async def status(client: Client) -> Response:
    "Whether or not the auth system is enabled"
    return await _get(client, '/enable', _auth_status)

async def enable(client: Client) -> Response:
    return await _change(client, 'PUT')

async def disable(client: Client) -> Response:
    return await _change(client, 'DELETE')

async def get_users(client: Client) -> Response:
    return await _get(client, '/users', _users)

async def get_user(client: Client, name: str) -> Response:
    return await _get(client, _user_path(name), UserDetail)

async def create_user(client: Client, user: NewUser) -> Response:
    return await _put(client, _user_path(user.name),
                      user.as_json(), User)

async def update_user(client: Client, user: UserUpdate) -> Response:
    return await _put(client, _user_path(user.name),
                      user.as_json(), User)

async def delete_user(client: Client, name: str) -> Response:
    return await _delete(client, _user_path(name))

async def get_roles(client: Client) -> Response:
    return await _get(client, '/roles', _roles)

async def get_role(client: Client, name: str) -> Response:
    return await _get(client, _role_path(name), Role.from_json)

async def create_role(client: Client, role: Role) -> Response:
    return await _put(client, _role_path(role.name),
                      role.as_json(), Role.from_json)

async def update_role(client: Client, role: RoleUpdate) -> Response:
    return await _put(client, _role_path(role.name),
                      role.as_json(), Role.from_json)

async def delete_role(client: Client, name: str) -> Response:
    return await _delete(client, _role_path(name))
