from typing import Dict, Any, List, Tuple, Optional
from urllib.parse import urlencode
from .exceptions import InvalidConditions

OptionPairs = List[Tuple[str, str]]

def bool_to_str(b: bool) -> str:
    return 'true' if b else 'false'

class ComparisonConditions:
    '''
    Conditions of "compare and delete" and "compare and swap"
    '''
    def __init__(self, value: Optional[str]=None, modified_index: Optional[int]=None) -> None:
        self.value = value
        self.modified_index = modified_index

    def is_empty(self) -> bool:
        return self.value is None and self.modified_index is None

    def option_pairs(self) -> OptionPairs:
        if self.is_empty():
            raise InvalidConditions()
        pairs: OptionPairs = []
        if self.modified_index is not None:
            pairs.append(('prevIndex', str(self.modified_index)))
        if self.value is not None:
            pairs.append(('prevValue', self.value))
        return pairs

class GetOptions:
    def __init__(self,
                 recursive: bool=False,
                 sort: Optional[bool]=None,
                 strong_consistency: bool=False,
                 wait: bool=False,
                 wait_index: Optional[int]=None) -> None:
        self.recursive = recursive
        self.sort = sort
        self.strong_consistency = strong_consistency
        self.wait = wait
        self.wait_index = wait_index

    def to_query(self) -> str:
        pairs: OptionPairs = [('recursive', bool_to_str(self.recursive))]
        if self.sort is not None:
            pairs.append(('sorted', bool_to_str(self.sort)))
        if self.strong_consistency:
            pairs.append(('quorum', 'true'))
        if self.wait:
            pairs.append(('wait', 'true'))
        if self.wait_index is not None:
            pairs.append(('waitIndex', str(self.wait_index)))
        return urlencode(pairs)

class DeleteOptions:
    def __init__(self,
                 recursive: Optional[bool]=None,
                 dir: Optional[bool]=None,
                 conditions: Optional[ComparisonConditions]=None) -> None:
        self.recursive = recursive
        self.dir = dir
        self.conditions = conditions

    def to_query(self) -> str:
        pairs: OptionPairs = []
        if self.recursive is not None:
            pairs.append(('recursive', bool_to_str(self.recursive)))
        if self.dir is not None:
            pairs.append(('dir', bool_to_str(self.dir)))
        if self.conditions is not None:
            pairs.extend(self.conditions.option_pairs())
        return urlencode(pairs)

class SetOptions:
    def __init__(self,
                 value: Optional[str]=None,
                 ttl: Optional[int]=None,
                 dir: Optional[bool]=None,
                 prev_exist: Optional[bool]=None,
                 refresh: bool=False,
                 create_in_order: bool=False,
                 conditions: Optional[ComparisonConditions]=None) -> None:
        self.value = value
        self.ttl = ttl
        self.dir = dir
        self.prev_exist = prev_exist
        self.refresh = refresh
        self.create_in_order = create_in_order
        self.conditions = conditions

    @property
    def method(self) -> str:
        return 'POST' if self.create_in_order else 'PUT'

    def to_body(self) -> str:
        pairs: OptionPairs = []
        if self.value is not None:
            pairs.append(('value', self.value))
        if self.ttl is not None:
            pairs.append(('ttl', str(self.ttl)))
        if self.dir is not None:
            pairs.append(('dir', bool_to_str(self.dir)))

        # refresh only applies to an existing key
        prev_exist = self.prev_exist
        if prev_exist is None and self.refresh:
            prev_exist = True
        if prev_exist is not None:
            pairs.append(('prevExist', bool_to_str(prev_exist)))
        if self.refresh:
            pairs.append(('refresh', 'true'))

        if self.conditions is not None:
            pairs.extend(self.conditions.option_pairs())
        return urlencode(pairs)
