"""
Packing: from a value to the bytes of a record.

Every field is written at its own absolute range, exactly as wide as
declared: shorter content is padded with the pad character of the field
on the side opposite to its justification, longer content is truncated
to the width of the field (keeping the leading bytes, and whole
characters for text).

The record is as long as the largest range end of the tree; the bytes
not covered by any field are left to the fill value (a space by default).
"""
import copy
import logging
from typing import List, Mapping, Optional, Sequence, Tuple

from .cursor import Cursor
from .enum import Justify
from .exceptions import FixedStructException, MessageError, UnexpectedEndOfRecord
from .fields import FieldGroup, FieldNode, FieldSpec, as_group
from .shapes import OptionShape


logger = logging.getLogger(__name__)

DEFAULT_FILL = b' '


def _is_continuation(byte: int) -> bool:
    return byte & 0xC0 == 0x80


def justify(spec: FieldSpec, data: bytes, text: bool = True) -> bytes:
    '''Size data to the width of the field, padding or truncating it.

    For text the cut never falls inside a character: the bytes of a
    character that doesn't fit are dropped and padded instead.'''
    width = max(spec.width, 0)
    if len(data) > width:
        logger.warning('truncating %r to the %d bytes of field %s', data, width, spec.key)
        cut = width
        while text and cut > 0 and _is_continuation(data[cut]):
            cut -= 1
        data = data[:cut]

    missing = width - len(data)
    pad = spec.pad_with.encode('utf-8') or b' '
    # whole pad characters only, what is left of the width gets a space
    padding = pad * (missing // len(pad)) + b' ' * (missing % len(pad))

    if spec.justify == Justify.RIGHT:
        return padding + data

    return data + padding


class Packer(object):

    def __init__(self, fields: FieldNode, fill: bytes = DEFAULT_FILL):
        if len(fill) != 1:
            raise ValueError(f'fill must be a single byte, not {fill!r}')

        self.logger = logging.getLogger(__name__)
        self.fields = as_group(fields)
        self.buffer = bytearray(fill * self.fields.max_end())
        self.cursor = Cursor(self.fields, self.buffer)

    def __repr__(self):
        return '<%s(%r)>' % (self.__class__.__name__, self.cursor)

    def scoped(self, cursor: Cursor) -> "Packer":
        packer = copy.copy(self)
        packer.cursor = cursor
        return packer

    def pack(self, shape, value) -> bytes:
        shape.pack(self, value)
        return bytes(self.buffer)

    def _write(self, data: bytes, text: bool = True):
        spec = self.cursor.next_leaf()
        self.logger.debug('field %d..%d <- %r', spec.start, spec.end, data)
        self.cursor.write_field(spec, justify(spec, data, text=text))

    def _write_str(self, value: str):
        self._write(value.encode('utf-8'))

    def _blank(self, node: FieldNode):
        for spec in node.leaves():
            self.cursor.write_field(spec, justify(spec, b''))

    def pack_bool(self, value: bool):
        self._write_str('1' if value else '0')

    def pack_int(self, value: int):
        self._write_str(str(value))

    def pack_float(self, value: float):
        self._write_str(str(value))

    def pack_str(self, value: str):
        self._write_str(value)

    def pack_char(self, value: str):
        self._write_str(value)

    def pack_bytes(self, value: bytes):
        self._write(value, text=False)

    def pack_unit(self):
        self._write(b'')

    def pack_none(self):
        self._write(b'')

    def pack_seq(self, shape, items: Sequence[Tuple[object, object]], names: Optional[List[str]] = None):
        '''items are couples (shape, value) to be packed in order.'''
        for index, (item_shape, value) in enumerate(items):
            try:
                node = self.cursor.peek_field()
                if node is None:
                    raise UnexpectedEndOfRecord()

                if isinstance(node, FieldGroup) and value is None and isinstance(item_shape, OptionShape):
                    # an absent composite: its whole group is left blank
                    self._blank(self.cursor.enter().node)
                elif isinstance(node, FieldGroup):
                    item_shape.pack(self.scoped(self.cursor.enter()), value)
                else:
                    item_shape.pack(self, value)
            except FixedStructException as e:
                raise e.within(names[index] if names else index)

    def pack_map(self, shape, mapping: Mapping):
        specs = []
        while not self.cursor.done():
            node = self.cursor.peek_field()
            if not isinstance(node, FieldSpec):
                raise UnexpectedEndOfRecord()
            specs.append(node)
            self.cursor.skip_field()

        unknown = set(mapping) - {_.key for _ in specs}
        if unknown:
            raise MessageError(f'no field for the keys {sorted(unknown, key=str)}')

        for spec in specs:
            if spec.key not in mapping:
                self._blank(spec)
                continue

            packer = self.scoped(Cursor(spec, self.buffer))
            try:
                shape.value.pack(packer, mapping[spec.key])
            except FixedStructException as e:
                raise e.within(spec.key)

    def pack_enum(self, shape, tag: str):
        self._write_str(tag)
