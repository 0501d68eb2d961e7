import enum
from dataclasses import dataclass
from typing import Any, Dict, List, NewType, Optional, Tuple, Union

import pytest

from fixedstruct.exceptions import UnsupportedShape
from fixedstruct.shapes import (
    AnyShape,
    BoolShape,
    BytesShape,
    Char,
    CharShape,
    EnumShape,
    FloatShape,
    IntShape,
    MapShape,
    NewtypeShape,
    OptionShape,
    RecordShape,
    SeqShape,
    StrShape,
    TupleShape,
    UnitShape,
    shape_for,
    shape_of,
)


class Color(enum.Enum):
    RED = 1
    GREEN = 2


class Room(int):
    pass


UserId = NewType('UserId', int)


@dataclass
class Point:
    x: int
    y: int
    label: Optional[str] = None


def test_shape_for_scalars():
    assert isinstance(shape_for(bool), BoolShape)
    assert isinstance(shape_for(int), IntShape)
    assert isinstance(shape_for(float), FloatShape)
    assert isinstance(shape_for(str), StrShape)
    assert isinstance(shape_for(Char), CharShape)
    assert isinstance(shape_for(bytes), BytesShape)
    assert isinstance(shape_for(None), UnitShape)
    assert isinstance(shape_for(type(None)), UnitShape)
    assert isinstance(shape_for(Any), AnyShape)


def test_shape_for_passes_shapes_through():
    shape = IntShape()

    assert shape_for(shape) is shape


def test_shape_for_generics():
    shape = shape_for(Optional[int])
    assert isinstance(shape, OptionShape)
    assert isinstance(shape.inner, IntShape)

    shape = shape_for(List[Tuple[int, str]])
    assert isinstance(shape, SeqShape)
    assert isinstance(shape.inner, TupleShape)
    assert [type(_) for _ in shape.inner.items] == [IntShape, StrShape]

    shape = shape_for(Tuple[int, ...])
    assert isinstance(shape, SeqShape)
    assert shape.factory is tuple

    shape = shape_for(Dict[str, float])
    assert isinstance(shape, MapShape)
    assert isinstance(shape.value, FloatShape)

    assert isinstance(shape_for(dict).value, StrShape)


def test_shape_for_types():
    assert isinstance(shape_for(Color), EnumShape)

    shape = shape_for(Point)
    assert isinstance(shape, RecordShape)
    assert [_ for _, __ in shape.members] == ['x', 'y', 'label']
    assert isinstance(shape.members[2][1], OptionShape)

    shape = shape_for(Room)
    assert isinstance(shape, NewtypeShape)
    assert shape.cls is Room

    assert isinstance(shape_for(UserId), IntShape)


def test_shape_for_unsupported():
    for hint in (Dict[int, str], Union[int, str], object, 'int'):
        with pytest.raises(UnsupportedShape):
            shape_for(hint)


def test_shape_of_values():
    assert isinstance(shape_of(True), BoolShape)
    assert isinstance(shape_of(1), IntShape)
    assert isinstance(shape_of(1.5), FloatShape)
    assert isinstance(shape_of('a'), StrShape)
    assert isinstance(shape_of(b'a'), BytesShape)
    assert isinstance(shape_of(None), UnitShape)
    assert isinstance(shape_of(Color.RED), EnumShape)
    assert isinstance(shape_of(Point(1, 2)), RecordShape)
    assert isinstance(shape_of([1, 2]), SeqShape)
    assert isinstance(shape_of({'a': 1}), MapShape)

    with pytest.raises(UnsupportedShape):
        shape_of(object())
