"""
The field model: a tree whose leaves are byte ranges of a record
and whose inner nodes are ordered groups of other nodes.

The tree is configuration, built once and shared: every method that
looks like a setter returns a new instance instead.
"""
import copy
import re
from typing import Iterator, Tuple, Union

from .enum import Justify


DEFAULT_PAD = ' '

RANGE_RE = re.compile(r'^\s*(\d+)\s*\.\.\s*(\d+)\s*$')


def parse_range(text: str) -> Tuple[int, int]:
    '''Parse the textual form "start..end" of a half-open byte range.'''
    match = RANGE_RE.match(text) if isinstance(text, str) else None
    if not match:
        raise ValueError(f'invalid range {text!r}, expected something like "0..4"')

    return int(match.group(1)), int(match.group(2))


class FieldSpec(object):
    """Leaf of the tree: a single field living in [start, end) of the record."""

    def __init__(self, start: int, end: int, name=None, pad_with=DEFAULT_PAD, justify=Justify.LEFT):
        self.start = start
        self.end = end
        self.name = name
        self.pad_with = pad_with
        self.justify = Justify.parse(justify)

    def __repr__(self):
        msg = ['%d..%d' % (self.start, self.end)]
        if self.name is not None:
            msg.append('name=%r' % self.name)
        if self.pad_with != DEFAULT_PAD:
            msg.append('pad_with=%r' % self.pad_with)
        if self.justify != Justify.LEFT:
            msg.append('justify=%s' % self.justify.value)
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(msg))

    def __eq__(self, other):
        if not isinstance(other, FieldSpec):
            return NotImplemented

        return self._key_tuple() == other._key_tuple()

    def __hash__(self):
        return hash(self._key_tuple())

    def _key_tuple(self):
        return (self.start, self.end, self.name, self.pad_with, self.justify)

    @property
    def range(self) -> range:
        return range(self.start, self.end)

    @property
    def width(self) -> int:
        return self.end - self.start

    @property
    def key(self) -> str:
        '''What identifies the field when the destination is a map.'''
        return self.name if self.name is not None else '%d..%d' % (self.start, self.end)

    def _replace(self, **kwargs) -> "FieldSpec":
        instance = copy.copy(self)
        instance.__dict__.update(kwargs)
        return instance

    def named(self, name: str) -> "FieldSpec":
        return self._replace(name=name)

    def padded(self, pad_with: str) -> "FieldSpec":
        return self._replace(pad_with=pad_with)

    def justified(self, justify) -> "FieldSpec":
        return self._replace(justify=Justify.parse(justify))

    def shift(self, offset: int) -> "FieldSpec":
        return self._replace(start=self.start + offset, end=self.end + offset)

    def leaves(self) -> Iterator["FieldSpec"]:
        yield self

    def max_end(self) -> int:
        return self.end


class FieldGroup(object):
    '''An ordered sequence of nodes, it models records, tuples and arrays.

    Ranges inside a group don't need to be contiguous nor ordered.'''

    def __init__(self, nodes=()):
        self.nodes = tuple(nodes)

        for node in self.nodes:
            if not isinstance(node, (FieldSpec, FieldGroup)):
                raise TypeError(f'{node!r} is not a FieldSpec nor a FieldGroup')

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(repr(_) for _ in self.nodes))

    def __eq__(self, other):
        if not isinstance(other, FieldGroup):
            return NotImplemented

        return self.nodes == other.nodes

    def __hash__(self):
        return hash(self.nodes)

    def __iter__(self):
        return iter(self.nodes)

    def __len__(self):
        return len(self.nodes)

    def __getitem__(self, item):
        if isinstance(item, slice):
            return FieldGroup(self.nodes[item])

        return self.nodes[item]

    def leaves(self) -> Iterator[FieldSpec]:
        '''Depth first iteration over the leaves, in document order.'''
        for node in self.nodes:
            yield from node.leaves()

    def max_end(self) -> int:
        return max((_.end for _ in self.leaves()), default=0)

    def shift(self, offset: int) -> "FieldGroup":
        return FieldGroup(_.shift(offset) for _ in self.nodes)


FieldNode = Union[FieldSpec, FieldGroup]


def field(start, end=None) -> FieldSpec:
    '''Build a leaf from either field(0, 4), field("0..4") or field(range(0, 4)).'''
    if end is None:
        if isinstance(start, range):
            start, end = start.start, start.stop
        else:
            start, end = parse_range(start)

    return FieldSpec(start, end)


def field_seq(*nodes: FieldNode) -> FieldGroup:
    '''Literal form for groups:

        field_seq(
            field(0, 4).named("foo"),
            field_seq(
                field(4, 6),
                field(6, 8),
            ),
        )
    '''
    return FieldGroup(nodes)


def as_group(node: FieldNode) -> FieldGroup:
    return node if isinstance(node, FieldGroup) else FieldGroup([node])


