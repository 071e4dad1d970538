'''
etcd's members API, used to manage cluster membership.
'''
from typing import Dict, Any, List

from .client import (
    Client, FORM_HEADERS, decode_api_error, decode_json,
    parse_etcd_response, parse_empty_response, is_ok)
from .response import ClusterInfo, Response
from .utils import json_to_str

class Member:
    id: str
    name: str
    peer_urls: List[str]
    client_urls: List[str]

    def __init__(self, body: Dict[str, Any]) -> None:
        self.id = body['id']
        self.name = body.get('name') or ''
        # lists are empty while a member is bootstrapping
        self.peer_urls = body.get('peerURLs') or []
        self.client_urls = body.get('clientURLs') or []

    def as_json(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'peerURLs': self.peer_urls,
            'clientURLs': self.client_urls,
        }

    def __repr__(self) -> str:
        return 'Member({!r}, {!r})'.format(self.id, self.name)

def build_url(endpoint: str, path: str='') -> str:
    return '{}v2/members{}'.format(endpoint, path)

def _members(body: Dict[str, Any]) -> List[Member]:
    return [Member(m) for m in body['members']]

def _peer_urls_body(peer_urls: List[str]) -> str:
    return json_to_str({'peerURLs': [str(u) for u in peer_urls]})

async def list(client: Client) -> Response:
    "Lists the members of the cluster"
    async def _list(client: Client, endpoint: str) -> Response:
        async with client.session.get(build_url(endpoint)) as resp:
            return await parse_etcd_response(resp, _members, is_ok)
    return await client.first_ok(_list)

async def add(client: Client, peer_urls: List[str]) -> Response:
    '''
    Adds a member to the cluster. The data is the new Member when etcd
    answers with it, None otherwise.
    '''
    body = _peer_urls_body(peer_urls)

    async def _add(client: Client, endpoint: str) -> Response:
        async with client.session.post(
                build_url(endpoint),
                data=body,
                headers=FORM_HEADERS) as resp:
            cluster_info = ClusterInfo.from_headers(resp.headers)
            data = await resp.read()
            if resp.status == 201 and data.strip():
                return Response(decode_json(data, Member), cluster_info)
            elif resp.status in (201, 204):
                return Response(None, cluster_info)
            raise decode_api_error(data, resp.status)
    return await client.first_ok(_add)

async def update(client: Client, id: str, peer_urls: List[str]) -> Response:
    "Updates the peer urls of a member"
    body = _peer_urls_body(peer_urls)

    async def _update(client: Client, endpoint: str) -> Response:
        async with client.session.put(
                build_url(endpoint, '/{}'.format(id)),
                data=body,
                headers=FORM_HEADERS) as resp:
            return await parse_empty_response(resp)
    return await client.first_ok(_update)

async def delete(client: Client, id: str) -> Response:
    "Removes a member from the cluster"
    async def _delete(client: Client, endpoint: str) -> Response:
        async with client.session.delete(
                build_url(endpoint, '/{}'.format(id))) as resp:
            return await parse_empty_response(resp)
    return await client.first_ok(_delete)
