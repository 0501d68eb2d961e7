"""
Shapes are the adapters between the engines and the Python values.

The engines don't know anything about the destination types: unpacking
calls shape.unpack(unpacker), the shape asks the unpacker for what it
expects to find (unpack_int(), unpack_seq(), ...) and the unpacker,
once the bytes are interpreted, calls back the builder method of the
shape (build_int(), build_sequence(), ...) to obtain the final value.

Packing goes the other way around: shape.pack(packer, value) checks the
value and hands it to the right packer.pack_*() method.

A shape can be obtained from a type annotation with shape_for():

    >>> shape_for(Optional[int])
    <OptionShape(<IntShape>)>
"""
import dataclasses
import enum
import numbers
import types
import typing
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .exceptions import (
    FixedStructException,
    MessageError,
    UnexpectedEndOfRecord,
    UnsupportedShape,
)


class Char(str):
    '''Marker type for annotations: a single character field.'''
    pass


def _expect(value, kinds, shape):
    if not isinstance(value, kinds):
        raise MessageError(f'{shape!r} cannot pack a value of type {type(value).__name__}: {value!r}')


class Shape(object):
    """Base class to subclass from"""

    def __repr__(self):
        return '<%s>' % self.__class__.__name__

    def unpack(self, unpacker):
        raise NotImplementedError(f'method {self.__class__.__name__}.unpack() not implemented')

    def pack(self, packer, value):
        raise NotImplementedError(f'method {self.__class__.__name__}.pack() not implemented')

    # the following are called back by the unpacker; a shape implements
    # only the ones matching what it asked for.

    def _unexpected(self, what):
        return UnsupportedShape(f'{self!r} does not build from {what}')

    def build_bool(self, value: bool):
        raise self._unexpected('a boolean')

    def build_int(self, value: int):
        raise self._unexpected('an integer')

    def build_float(self, value: float):
        raise self._unexpected('a float')

    def build_str(self, value: str):
        raise self._unexpected('a string')

    def build_char(self, value: str):
        raise self._unexpected('a character')

    def build_bytes(self, value: bytes):
        raise self._unexpected('bytes')

    def build_unit(self):
        raise self._unexpected('a unit')

    def build_none(self):
        raise self._unexpected('an absent value')

    def build_some(self, unpacker):
        raise self._unexpected('a present value')

    def build_sequence(self, elements):
        raise self._unexpected('a sequence')

    def build_map(self, entries):
        raise self._unexpected('a map')

    def build_enum(self, tag: str, variant):
        raise self._unexpected('an enum')


class BoolShape(Shape):

    def unpack(self, unpacker):
        return unpacker.unpack_bool(self)

    def build_bool(self, value):
        return value

    def pack(self, packer, value):
        _expect(value, bool, self)
        packer.pack_bool(value)


class IntShape(Shape):

    def unpack(self, unpacker):
        return unpacker.unpack_int(self)

    def build_int(self, value):
        return value

    def pack(self, packer, value):
        _expect(value, numbers.Integral, self)
        packer.pack_int(int(value))


class FloatShape(Shape):

    def unpack(self, unpacker):
        return unpacker.unpack_float(self)

    def build_float(self, value):
        return value

    def pack(self, packer, value):
        _expect(value, numbers.Real, self)
        packer.pack_float(float(value))


class StrShape(Shape):

    def unpack(self, unpacker):
        return unpacker.unpack_str(self)

    def build_str(self, value):
        return value

    def pack(self, packer, value):
        _expect(value, str, self)
        packer.pack_str(value)


class CharShape(Shape):
    '''Single character; an empty field is a space, not an absence.'''

    def unpack(self, unpacker):
        return unpacker.unpack_char(self)

    def build_char(self, value):
        return value

    def pack(self, packer, value):
        _expect(value, str, self)
        if len(value) != 1:
            raise MessageError(f'expected a single character, got {value!r}')

        packer.pack_char(value)


class BytesShape(Shape):
    '''Raw content of the field, no trimming.'''

    def unpack(self, unpacker):
        return unpacker.unpack_bytes(self)

    def build_bytes(self, value):
        return value

    def pack(self, packer, value):
        _expect(value, (bytes, bytearray, memoryview), self)
        packer.pack_bytes(bytes(value))


class UnitShape(Shape):
    """Placeholder occupying a field without carrying data.

    The optional factory builds the value returned, like a marker class."""

    def __init__(self, factory: Optional[Callable[[], Any]] = None):
        self.factory = factory

    def unpack(self, unpacker):
        return unpacker.unpack_unit(self)

    def build_unit(self):
        return self.factory() if self.factory else None

    def pack(self, packer, value):
        packer.pack_unit()


class OptionShape(Shape):
    '''A blank field is None, otherwise the inner shape applies.'''

    def __init__(self, inner: Shape):
        self.inner = inner

    def __repr__(self):
        return '<%s(%r)>' % (self.__class__.__name__, self.inner)

    def unpack(self, unpacker):
        return unpacker.unpack_option(self)

    def build_none(self):
        return None

    def build_some(self, unpacker):
        return self.inner.unpack(unpacker)

    def pack(self, packer, value):
        if value is None:
            packer.pack_none()
        else:
            self.inner.pack(packer, value)


class NewtypeShape(Shape):
    '''Wrap the value of the inner shape with a type accepting it as the only argument,
    like subclasses of int or str.'''

    def __init__(self, cls: Callable, inner: Shape):
        self.cls = cls
        self.inner = inner

    def __repr__(self):
        return '<%s(%s,%r)>' % (self.__class__.__name__, getattr(self.cls, '__name__', self.cls), self.inner)

    def unpack(self, unpacker):
        value = self.inner.unpack(unpacker)
        try:
            return self.cls(value)
        except ValueError as e:
            raise MessageError(str(e)) from e

    def pack(self, packer, value):
        self.inner.pack(packer, value)


class SeqShape(Shape):
    """Homogeneous sequence of elements.

    Without "n" it takes all the fields left at its level, otherwise
    it needs exactly n elements."""

    def __init__(self, inner: Shape, n: Optional[int] = None, factory: Callable = list):
        self.inner = inner
        self.n = n
        self.factory = factory

    def __repr__(self):
        return '<%s(%r,n=%r)>' % (self.__class__.__name__, self.inner, self.n)

    def unpack(self, unpacker):
        return unpacker.unpack_seq(self)

    def build_sequence(self, elements):
        values = []
        while elements.has_next() and (self.n is None or len(values) < self.n):
            try:
                values.append(elements.next(self.inner))
            except FixedStructException as e:
                raise e.within(len(values))

        if self.n is not None and len(values) < self.n:
            raise UnexpectedEndOfRecord(f'expected {self.n} elements, found {len(values)}')

        return self.factory(values)

    def pack(self, packer, value):
        _expect(value, (list, tuple), self)
        if self.n is not None and len(value) != self.n:
            raise MessageError(f'expected {self.n} elements, got {len(value)}')

        packer.pack_seq(self, [(self.inner, _) for _ in value])


class TupleShape(Shape):

    def __init__(self, *items: Shape):
        self.items = items

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(repr(_) for _ in self.items))

    def unpack(self, unpacker):
        return unpacker.unpack_seq(self)

    def build_sequence(self, elements):
        values = []
        for index, shape in enumerate(self.items):
            try:
                if not elements.has_next():
                    raise UnexpectedEndOfRecord(f'tuple of {len(self.items)} elements has only {index} fields')
                values.append(elements.next(shape))
            except FixedStructException as e:
                raise e.within(index)

        return tuple(values)

    def pack(self, packer, value):
        _expect(value, (list, tuple), self)
        if len(value) != len(self.items):
            raise MessageError(f'expected {len(self.items)} elements, got {len(value)}')

        packer.pack_seq(self, list(zip(self.items, value)))


class MapShape(Shape):
    '''dict keyed by the name of the fields (or their range when unnamed).'''

    def __init__(self, value: Optional[Shape] = None):
        self.value = value if value is not None else StrShape()

    def __repr__(self):
        return '<%s(%r)>' % (self.__class__.__name__, self.value)

    def unpack(self, unpacker):
        return unpacker.unpack_map(self)

    def build_map(self, entries):
        result = {}
        while (key := entries.next_key()) is not None:
            try:
                result[key] = entries.next_value(self.value)
            except FixedStructException as e:
                raise e.within(key)

        return result

    def pack(self, packer, value):
        _expect(value, Mapping, self)
        packer.pack_map(self, value)


class RecordShape(Shape):
    """Composite value built from its members in order.

    The members are couples (attribute name, shape); the value is built
    calling cls with the attributes as keyword arguments."""

    def __init__(self, cls: Callable, members: Sequence[Tuple[str, Shape]]):
        self.cls = cls
        self.members = list(members)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, getattr(self.cls, '__name__', self.cls))

    @classmethod
    def from_dataclass(cls, klass) -> "RecordShape":
        hints = typing.get_type_hints(klass)
        return cls(klass, [(_.name, shape_for(hints[_.name])) for _ in dataclasses.fields(klass) if _.init])

    def unpack(self, unpacker):
        return unpacker.unpack_seq(self)

    def build_sequence(self, elements):
        kwargs = {}
        for name, shape in self.members:
            try:
                if not elements.has_next():
                    raise UnexpectedEndOfRecord()
                kwargs[name] = elements.next(shape)
            except FixedStructException as e:
                raise e.within(name)

        try:
            return self.cls(**kwargs)
        except ValueError as e:
            raise MessageError(str(e)) from e

    def pack(self, packer, value):
        try:
            items = [(shape, getattr(value, name)) for name, shape in self.members]
        except AttributeError as e:
            raise MessageError(f'{self!r} cannot pack {value!r}: {e}') from e

        packer.pack_seq(self, items, names=[_ for _, __ in self.members])


class ChoiceShape(Shape):
    """Enumeration of tags, each one with an optional payload.

    Only the variants without payload (None) can be handled: the tag
    fills the whole field so there is no room for associated data. The
    value is the tag itself."""

    def __init__(self, variants: Mapping[str, Optional[Shape]]):
        self.variants = dict(variants)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(self.variants))

    def unpack(self, unpacker):
        return unpacker.unpack_enum(self)

    def select(self, tag: str):
        if tag not in self.variants:
            raise MessageError(f'unknown variant {tag!r}, expected one of {list(self.variants)}')

        return self.variants[tag]

    def build_enum(self, tag, variant):
        payload = self.select(tag)

        if payload is None:
            variant.unit_variant()
        elif isinstance(payload, TupleShape):
            variant.tuple_variant(payload)
        elif isinstance(payload, RecordShape):
            variant.struct_variant(payload)
        else:
            variant.newtype_variant(payload)

        return self.build_variant(tag)

    def build_variant(self, tag: str):
        return tag

    def tag_of(self, value) -> str:
        _expect(value, str, self)
        return value

    def pack(self, packer, value):
        tag = self.tag_of(value)
        if self.select(tag) is not None:
            raise UnsupportedShape(f'unsupported variant shape: {tag!r} carries data')

        packer.pack_enum(self, tag)


class EnumShape(ChoiceShape):
    """Python enum, the tag of each member is its name.

    The optional "rename" transforms the names, like str.lower when the
    data has lowercase tags. The match is case sensitive."""

    def __init__(self, enum_cls, rename: Optional[Callable[[str], str]] = None):
        self.enum_cls = enum_cls
        self.rename = rename
        self._members: Dict[str, enum.Enum] = {}
        for member in enum_cls:
            self._members[self._tag(member)] = member

        super().__init__({_: None for _ in self._members})

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, self.enum_cls.__name__)

    def _tag(self, member) -> str:
        return self.rename(member.name) if self.rename else member.name

    def build_variant(self, tag):
        return self._members[tag]

    def tag_of(self, value):
        _expect(value, self.enum_cls, self)
        return self._tag(value)


class AnyShape(Shape):
    """No shape at all.

    Fixed width data doesn't describe itself so unpacking is refused;
    packing instead looks at the value to choose the shape."""

    def unpack(self, unpacker):
        return unpacker.unpack_any(self)

    def pack(self, packer, value):
        shape_of(value).pack(packer, value)


# Optional[int] and, since 3.10, int | None
UNION_TYPES = (typing.Union, getattr(types, 'UnionType', typing.Union))

SCALARS: List[Tuple[type, Callable[[], Shape]]] = [
    (bool, BoolShape),
    (int, IntShape),
    (float, FloatShape),
    (Char, CharShape),
    (str, StrShape),
    (bytes, BytesShape),
]


def _is_record(hint) -> bool:
    from .core import Record
    return isinstance(hint, type) and issubclass(hint, Record)


def shape_for(hint) -> Shape:
    '''Translate a type annotation into the shape to use.'''
    if isinstance(hint, Shape):
        return hint

    if hint is None or hint is type(None):
        return UnitShape()

    if hint is Any:
        return AnyShape()

    # typing.NewType
    if hasattr(hint, '__supertype__'):
        return shape_for(hint.__supertype__)

    origin = typing.get_origin(hint)
    args = typing.get_args(hint)

    if origin in UNION_TYPES:
        others = [_ for _ in args if _ is not type(None)]
        if len(others) == 1 and len(args) == 2:
            return OptionShape(shape_for(others[0]))

        raise UnsupportedShape(f'cannot choose the destination among {hint!r}')

    if origin is list:
        return SeqShape(shape_for(args[0]) if args else AnyShape())

    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return SeqShape(shape_for(args[0]), factory=tuple)

        return TupleShape(*[shape_for(_) for _ in args])

    if origin is dict:
        if args and args[0] is not str:
            raise UnsupportedShape(f'map keys must be strings, not {args[0]!r}')

        return MapShape(shape_for(args[1]) if args else StrShape())

    if not isinstance(hint, type):
        raise UnsupportedShape(f'no shape for {hint!r}')

    if _is_record(hint):
        return hint.shape()

    if issubclass(hint, enum.Enum):
        return EnumShape(hint)

    if dataclasses.is_dataclass(hint):
        return RecordShape.from_dataclass(hint)

    if hint is list:
        return SeqShape(AnyShape())

    if hint is tuple:
        return SeqShape(AnyShape(), factory=tuple)

    if hint is dict:
        return MapShape()

    if hint is bytearray:
        return NewtypeShape(bytearray, BytesShape())

    for base, shape_cls in SCALARS:
        if hint is base:
            return shape_cls()
        if issubclass(hint, base):
            return NewtypeShape(hint, shape_for(base))

    raise UnsupportedShape(f'no shape for {hint!r}')


def shape_of(value) -> Shape:
    '''The shape of a value to pack when nothing else is known.'''
    if _is_record(type(value)):
        return type(value).shape()

    if isinstance(value, enum.Enum):
        return EnumShape(type(value))

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return RecordShape.from_dataclass(type(value))

    if value is None:
        return UnitShape()

    if isinstance(value, (list, tuple)):
        return SeqShape(AnyShape(), factory=type(value))

    if isinstance(value, Mapping):
        return MapShape(AnyShape())

    if isinstance(value, (bytearray, memoryview)):
        return BytesShape()

    for base, shape_cls in SCALARS:
        if isinstance(value, base):
            return shape_cls()

    raise UnsupportedShape(f'no shape for value of type {type(value).__name__}')
