"""
Core module: records and the entry points to pack and unpack them.

"""
import logging
import typing
from typing import List, Tuple, Union

from .exceptions import InvalidUtf8
from .fields import FieldGroup, FieldNode
from .meta import MetaRecord
from .packing import DEFAULT_FILL, Packer
from .shapes import AnyShape, RecordShape, StrShape, shape_for
from .unpacking import Unpacker


logger = logging.getLogger(__name__)


class Record(metaclass=MetaRecord):
    """
    Base class for the declarative definition of a record: each member
    declared with Field() or Nested() becomes a field (or a group) of the
    tree returned by fields(), while its annotation gives the type of the
    value. Members without annotation are strings.

    NOTE: the annotations are resolved the first time the record is used,
    so forward references are fine.
    """

    def __init__(self, **kwargs):
        unknown = set(kwargs) - set(self._meta.fields)
        if unknown:
            raise TypeError(f'{self.__class__.__name__} got unexpected members {sorted(unknown)}')

        for name in self._meta.fields:
            if name in kwargs:
                value = kwargs[name]
            else:
                value = self._meta.declarations[name].get_default()
            setattr(self, name, value)

    def get_fields(self) -> List[Tuple[str, object]]:
        '''It returns a list of couples (name, value) for each member.'''
        return [(_, getattr(self, _)) for _ in self._meta.fields]

    def __repr__(self):
        msg = []
        for name, value in self.get_fields():
            msg.append('%s=%r' % (name, value))
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(msg))

    def __str__(self):
        msg = ''
        for name, value in self.get_fields():
            msg += '%s: %r\n' % (name, value)
        return msg

    def __eq__(self, other):
        if other.__class__ is not self.__class__:
            return NotImplemented

        return self.get_fields() == other.get_fields()

    @classmethod
    def _hints(cls):
        return typing.get_type_hints(cls)

    @classmethod
    def fields(cls) -> FieldGroup:
        '''The field tree generated from the declarations.'''
        if cls._meta.field_tree is None:
            hints = cls._hints()
            cls._meta.field_tree = FieldGroup(
                cls._meta.declarations[_].build(hints.get(_)) for _ in cls._meta.members
            )

        return cls._meta.field_tree

    @classmethod
    def shape(cls) -> RecordShape:
        if cls._meta.shape is None:
            hints = cls._hints()
            cls._meta.shape = RecordShape(cls, [
                (_, shape_for(hints[_]) if _ in hints else StrShape()) for _ in cls._meta.members
            ])

        return cls._meta.shape

    @classmethod
    def from_bytes(cls, data: bytes) -> "Record":
        return from_bytes(data, cls)

    @classmethod
    def from_str(cls, text: str) -> "Record":
        return from_str(text, cls)

    def to_bytes(self, fill: bytes = DEFAULT_FILL) -> bytes:
        return to_bytes(self, fill=fill)

    def to_str(self, fill: bytes = DEFAULT_FILL) -> str:
        return to_str(self, fill=fill)


def _fields_for(target, fields):
    if fields is not None:
        return fields

    if isinstance(target, type) and issubclass(target, Record):
        return target.fields()

    raise ValueError(f'the fields are needed to handle {target!r}')


def from_bytes(data: Union[bytes, bytearray], target, fields: FieldNode = None):
    '''Unpack one record into the destination indicated by "target", a type
    annotation or a shape. When it's a Record the fields default to its own.'''
    fields = _fields_for(target, fields)
    shape = shape_for(target)

    logger.debug('unpacking %r from %d bytes', shape, len(data))

    return Unpacker(data, fields).unpack(shape)


def from_str(text: str, target, fields: FieldNode = None):
    return from_bytes(text.encode('utf-8'), target, fields=fields)


def to_bytes(value, target=None, fields: FieldNode = None, fill: bytes = DEFAULT_FILL) -> bytes:
    '''Pack a value into one record; without "target" the shape comes from the value.'''
    if fields is None and isinstance(value, Record):
        fields = value.fields()

    fields = _fields_for(target, fields)
    shape = shape_for(target) if target is not None else AnyShape()

    logger.debug('packing %r with %r', value, shape)

    return Packer(fields, fill=fill).pack(shape, value)


def to_str(value, target=None, fields: FieldNode = None, fill: bytes = DEFAULT_FILL) -> str:
    data = to_bytes(value, target=target, fields=fields, fill=fill)
    try:
        return data.decode('utf-8')
    except UnicodeDecodeError as e:
        raise InvalidUtf8(str(e)) from e


def to_writer(writer, value, target=None, fields: FieldNode = None, fill: bytes = DEFAULT_FILL):
    '''Pack a value and hand the record to a Writer.'''
    writer.write_record(to_bytes(value, target=target, fields=fields, fill=fill))
