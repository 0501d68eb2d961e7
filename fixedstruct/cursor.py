"""
Traversal state shared by the packing and unpacking engines.

A Cursor walks the children of a single FieldGroup in order, paired with
the buffer of the record; entering a nested group gives back a new Cursor
scoped to it, so the inner traversal can't run over its siblings.
"""
import logging
from typing import Optional, Union

from .exceptions import UnexpectedEndOfRecord, InvalidUtf8
from .fields import FieldGroup, FieldNode, FieldSpec, as_group


logger = logging.getLogger(__name__)


class Cursor(object):

    def __init__(self, node: FieldNode, buffer: Union[bytes, bytearray]):
        self.node = as_group(node)
        self.buffer = buffer
        self._position = 0

    def __repr__(self):
        return '<%s(%d/%d)>' % (self.__class__.__name__, self._position, len(self.node))

    def done(self) -> bool:
        return self._position >= len(self.node)

    def peek_field(self) -> Optional[FieldNode]:
        if self.done():
            return None

        return self.node[self._position]

    def next_field(self) -> Optional[FieldNode]:
        node = self.peek_field()
        if node is not None:
            self._position += 1

        return node

    def skip_field(self):
        self.next_field()

    def peek_leaf(self) -> FieldSpec:
        node = self.peek_field()
        if not isinstance(node, FieldSpec):
            # either a group where a single field was expected or nothing at all
            raise UnexpectedEndOfRecord()

        return node

    def next_leaf(self) -> FieldSpec:
        spec = self.peek_leaf()
        self._position += 1
        return spec

    def enter(self) -> "Cursor":
        '''Consume the next node, that must be a group, and return a cursor over it.'''
        node = self.peek_field()
        if not isinstance(node, FieldGroup):
            raise UnexpectedEndOfRecord()

        self._position += 1
        logger.debug('entering group %r', node)

        return self.__class__(node, self.buffer)

    def slice(self, spec: FieldSpec) -> bytes:
        if spec.start < 0 or spec.end > len(self.buffer) or spec.start > spec.end:
            logger.debug('range %d..%d out of a record of %d bytes', spec.start, spec.end, len(self.buffer))
            raise UnexpectedEndOfRecord()

        return bytes(self.buffer[spec.start:spec.end])

    def peek_bytes(self) -> bytes:
        return self.slice(self.peek_leaf())

    def next_bytes(self) -> bytes:
        # slice before advancing: on failure the cursor is left untouched
        data = self.peek_bytes()
        self._position += 1
        return data

    @staticmethod
    def decode(data: bytes) -> str:
        try:
            return data.decode('utf-8').strip()
        except UnicodeDecodeError as e:
            raise InvalidUtf8(str(e)) from e

    def peek_str(self) -> str:
        return self.decode(self.peek_bytes())

    def next_str(self) -> str:
        return self.decode(self.next_bytes())

    def write_field(self, spec: FieldSpec, data: bytes):
        '''Write data, already sized for the field, at the field's absolute range.'''
        # the output buffer is sized on the whole tree before packing
        if spec.start < 0 or spec.start > spec.end or spec.end > len(self.buffer):
            raise UnexpectedEndOfRecord(f'invalid range {spec.start}..{spec.end}')

        self.buffer[spec.start:spec.end] = data
