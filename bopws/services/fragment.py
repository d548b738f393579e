"""
Immutable Solr request fragments

Each builder returns a QueryFragment describing the params it wants; the query
orchestrator concatenates them and renders the final param list. `set`
replaces earlier values of a param, `add` appends another value.
"""
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple

SolrParams = List[Tuple[str, str]]

SET = "set"
ADD = "add"


@dataclass(frozen=True)
class ParamOp:
    action: str
    name: str
    value: str


@dataclass(frozen=True)
class QueryFragment:
    ops: Tuple[ParamOp, ...] = ()

    def set(self, name: str, value: Any) -> "QueryFragment":
        return QueryFragment(self.ops + (ParamOp(SET, name, _to_param(value)),))

    def add(self, name: str, value: Any) -> "QueryFragment":
        return QueryFragment(self.ops + (ParamOp(ADD, name, _to_param(value)),))

    def __add__(self, other: "QueryFragment") -> "QueryFragment":
        return QueryFragment(self.ops + other.ops)

    def get_all(self, name: str) -> List[str]:
        return [value for key, value in render(self) if key == name]

    def get(self, name: str) -> Optional[str]:
        values = self.get_all(name)
        return values[0] if values else None


def _to_param(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def render(*fragments: QueryFragment) -> SolrParams:
    """Apply the ops of the fragments in order and return the final params"""
    params: SolrParams = []
    for fragment in fragments:
        for op in fragment.ops:
            if op.action == SET:
                params = [(k, v) for k, v in params if k != op.name]
            params.append((op.name, op.value))
    return params


def merge_params(base: SolrParams, overrides: Iterable[Tuple[str, str]]) -> SolrParams:
    """Overrides replace every value of the params they name"""
    overrides = list(overrides)
    names = {name for name, _ in overrides}
    return [(k, v) for k, v in base if k not in names] + overrides
