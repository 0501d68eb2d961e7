"""
Unpacking: from the bytes of a record to a value.

The Unpacker owns a Cursor over the field tree and interprets the
content of the fields as requested by the shape of the destination:
the text of a field is always trimmed before being interpreted, only
bytes are returned verbatim.
"""
import copy
import logging
import re
from typing import Optional, Union

from .cursor import Cursor
from .exceptions import (
    BooleanParseError,
    FloatParseError,
    IntegerParseError,
    MessageError,
    UnexpectedEndOfRecord,
    UnsupportedShape,
    WontImplement,
)
from .fields import FieldGroup, FieldNode, FieldSpec


INTEGER_RE = re.compile(r'^[+-]?[0-9]+$')


class Unpacker(object):

    def __init__(self, buffer: Union[bytes, bytearray], fields: FieldNode):
        self.logger = logging.getLogger(__name__)
        self.cursor = Cursor(fields, buffer)

    def __repr__(self):
        return '<%s(%r)>' % (self.__class__.__name__, self.cursor)

    def scoped(self, cursor: Cursor) -> "Unpacker":
        '''Same unpacker but working on another cursor'''
        unpacker = copy.copy(self)
        unpacker.cursor = cursor
        return unpacker

    def unpack(self, shape):
        return shape.unpack(self)

    def _next_str(self) -> str:
        spec = self.cursor.peek_leaf()
        value = self.cursor.next_str()
        self.logger.debug('field %d..%d -> %r', spec.start, spec.end, value)
        return value

    def unpack_bool(self, shape):
        value = self._next_str()
        if len(value) > 1:
            raise BooleanParseError(f'expected bool field to be 1 byte, got {len(value)}')

        # blank is false as well
        return shape.build_bool((value or '0') != '0')

    def unpack_int(self, shape):
        value = self._next_str()
        if not INTEGER_RE.match(value):
            raise IntegerParseError(f'invalid digit found in {value!r}' if value else 'cannot parse integer from empty string')

        return shape.build_int(int(value))

    def unpack_float(self, shape):
        value = self._next_str()
        try:
            if '_' in value:
                raise ValueError(f'could not convert string to float: {value!r}')
            number = float(value)
        except ValueError as e:
            raise FloatParseError(f'invalid float literal {value!r}') from e

        return shape.build_float(number)

    def unpack_str(self, shape):
        return shape.build_str(self._next_str())

    def unpack_char(self, shape):
        value = self._next_str()
        if len(value) > 1:
            raise MessageError(f'expected char field to be 1 character, got {len(value)}')

        return shape.build_char(value or ' ')

    def unpack_bytes(self, shape):
        return shape.build_bytes(self.cursor.next_bytes())

    def unpack_unit(self, shape):
        self.cursor.skip_field()
        return shape.build_unit()

    def unpack_option(self, shape):
        # peek_str() fails on groups: an absent composite must have its own scope
        if not self.cursor.peek_str():
            self.cursor.skip_field()
            return shape.build_none()

        return shape.build_some(self)

    def unpack_seq(self, shape):
        return shape.build_sequence(Elements(self))

    def unpack_map(self, shape):
        return shape.build_map(Entries(self))

    def unpack_enum(self, shape):
        return shape.build_enum(self._next_str(), UnpackVariant())

    def unpack_any(self, shape):
        raise WontImplement()


class Elements(object):
    '''Access to the elements of a sequence, a tuple or a record.'''

    def __init__(self, unpacker: Unpacker):
        self.unpacker = unpacker

    def has_next(self) -> bool:
        return not self.unpacker.cursor.done()

    def next(self, shape):
        cursor = self.unpacker.cursor
        node = cursor.peek_field()

        if node is None:
            raise UnexpectedEndOfRecord()

        # a nested group is a value on its own
        if isinstance(node, FieldGroup):
            return self.unpacker.scoped(cursor.enter()).unpack(shape)

        return self.unpacker.unpack(shape)


class Entries(object):
    '''Access to the entries of a map: the keys come from the field specs.'''

    def __init__(self, unpacker: Unpacker):
        self.unpacker = unpacker

    def next_key(self) -> Optional[str]:
        cursor = self.unpacker.cursor
        if cursor.done():
            return None

        node = cursor.peek_field()
        if not isinstance(node, FieldSpec):
            raise UnexpectedEndOfRecord()

        return node.key

    def next_value(self, shape):
        return self.unpacker.unpack(shape)


class UnpackVariant(object):
    '''Once the tag has been read nothing is left for associated data.'''

    def unit_variant(self):
        pass

    def newtype_variant(self, shape):
        raise UnsupportedShape('unsupported variant shape: newtype variant')

    def tuple_variant(self, shape):
        raise UnsupportedShape('unsupported variant shape: tuple variant')

    def struct_variant(self, shape):
        raise UnsupportedShape('unsupported variant shape: struct variant')
