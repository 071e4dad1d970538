import pytest
from urllib.parse import parse_qsl

from aioetcd2.exceptions import InvalidConditions
from aioetcd2.options import (
    ComparisonConditions, DeleteOptions, GetOptions, SetOptions)

def test_get_options():
    assert GetOptions().to_query() == 'recursive=false'
    q = GetOptions(recursive=True, sort=False, wait=True, wait_index=12).to_query()
    assert q == 'recursive=true&sorted=false&wait=true&waitIndex=12'
    assert 'quorum=true' in GetOptions(strong_consistency=True).to_query()

def test_refresh_forces_prev_exist():
    body = SetOptions(ttl=30, refresh=True).to_body()
    pairs = dict(parse_qsl(body))
    assert pairs == {'ttl': '30', 'prevExist': 'true', 'refresh': 'true'}

def test_explicit_prev_exist_wins_over_refresh():
    pairs = dict(parse_qsl(SetOptions(ttl=5, refresh=True, prev_exist=False).to_body()))
    assert pairs['prevExist'] == 'false'

def test_set_options_body():
    body = SetOptions(value='a b&c', ttl=60, dir=False, prev_exist=False).to_body()
    assert body == 'value=a+b%26c&ttl=60&dir=false&prevExist=false'
    assert SetOptions(value='bar').to_body() == 'value=bar'
    assert SetOptions(value='bar').method == 'PUT'
    assert SetOptions(value='bar', create_in_order=True).method == 'POST'

def test_set_options_conditions():
    body = SetOptions(value='baz', conditions=ComparisonConditions(
        value='bar', modified_index=7)).to_body()
    assert dict(parse_qsl(body)) == {
        'value': 'baz', 'prevIndex': '7', 'prevValue': 'bar'}

    with pytest.raises(InvalidConditions):
        SetOptions(value='baz', conditions=ComparisonConditions()).to_body()

def test_delete_options():
    assert DeleteOptions().to_query() == ''
    assert DeleteOptions(recursive=True).to_query() == 'recursive=true'
    assert DeleteOptions(dir=True).to_query() == 'dir=true'
    q = DeleteOptions(conditions=ComparisonConditions(modified_index=3)).to_query()
    assert q == 'prevIndex=3'

    with pytest.raises(InvalidConditions):
        DeleteOptions(conditions=ComparisonConditions()).to_query()

def test_comparison_conditions():
    assert ComparisonConditions().is_empty()
    assert not ComparisonConditions(value='').is_empty()
    assert not ComparisonConditions(modified_index=0).is_empty()
