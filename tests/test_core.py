from typing import Dict, Optional

import pytest

from fixedstruct import Record, Field, Nested, field, field_seq, from_str, to_str
from fixedstruct.exceptions import IntegerParseError, UnexpectedEndOfRecord


class Person(Record):
    name: str = Field(range="0..6")
    age: int = Field(range="6..9", pad_with="0")
    height: int = Field(range="9..11", justify="right")
    gender: str = Field(skip=True, default="")


class Stuff(Record):
    stuff1: str = Field(range="0..6")
    stuff2: str = Field(range="6..12", pad_with="0")
    stuff3: int = Field(range="12..15", pad_with="0")
    stuff4: int = Field(range="15..19")
    stuff5: str = Field(range="21..27", default="foobar")
    stuff6: str = Field(range="27..31", justify="right")


class Optionals(Record):
    stuff1: Optional[str] = Field(range="0..4")
    stuff2: Optional[str] = Field(range="4..10")
    stuff3: Optional[int] = Field(range="10..15")


class Inner(Record):
    num: int = Field(range="0..3")
    text: str = Field(range="3..6")


class Outer(Record):
    first: Inner = Nested()
    second: Inner = Nested(offset=6)


def test_record_fields(person_fields):
    """The tree generated by the declarations skips the skipped members."""
    assert Person.fields() == person_fields
    assert Person.fields() is Person.fields()


def test_record_to_str():
    person = Person(name='foo', age=234, height=9)

    assert person.to_str() == 'foo   234 9'
    assert person.to_bytes() == b'foo   234 9'
    assert to_str(person) == 'foo   234 9'


def test_record_from_str():
    person = Person.from_str('foo   234 9')

    assert person == Person(name='foo', age=234, height=9)
    assert person.gender == ''

    assert Person.from_bytes(b'bar   001 7').age == 1


def test_record_fields_as_map():
    assert from_str('foo   234 9', Dict[str, str], Person.fields()) == {
        'name': 'foo',
        'age': '234',
        'height': '9',
    }


def test_record_error_has_the_member():
    with pytest.raises(IntegerParseError) as excinfo:
        Person.from_str('foo   abc 9')

    assert excinfo.value.chain == ['age']


def test_record_defaults():
    person = Person(name='foo')

    assert person.age is None
    assert person.gender == ''

    with pytest.raises(TypeError):
        Person(name='foo', weight=3)


def test_record_repr():
    person = Person(name='foo', age=1, height=2)

    assert repr(person) == "<Person(name='foo',age=1,height=2,gender='')>"
    assert str(person) == "name: 'foo'\nage: 1\nheight: 2\ngender: ''\n"


def test_field_declaration_is_validated():
    with pytest.raises(ValueError):
        Field()

    with pytest.raises(ValueError):
        Field(range="4-2")

    with pytest.raises(ValueError):
        Field(range="0..4", pad_with="ab")

    with pytest.raises(ValueError):
        Field(range="0..4", justify="center")

    # a skipped member needs no range
    Field(skip=True)


def test_field_declaration_name():
    class Renamed(Record):
        height: int = Field(range="0..3", name="height_cm", justify="RIGHT")

    assert Renamed.fields() == field_seq(field(0, 3).named('height_cm').justified('right'))


def test_record_inheritance():
    class Base(Record):
        a: int = Field(range="0..1")

    class Child(Base):
        b: int = Field(range="1..2")

    assert Child._meta.fields == ['a', 'b']
    assert Child.from_str('12') == Child(a=1, b=2)

    with pytest.raises(AttributeError):
        class Broken(Base):
            a: int = Field(range="1..2")


def test_nested_record():
    assert Outer.fields() == field_seq(
        field_seq(field(0, 3).named('num'), field(3, 6).named('text')),
        field_seq(field(6, 9).named('num'), field(9, 12).named('text')),
    )

    outer = Outer.from_str('123abc321cba')

    assert outer == Outer(first=Inner(num=123, text='abc'), second=Inner(num=321, text='cba'))
    assert outer.to_str() == '123abc321cba'


def test_nested_needs_a_record():
    class Wrong(Record):
        inner: int = Nested()

    with pytest.raises(TypeError):
        Wrong.fields()


def test_serialize_stuff():
    stuff = Stuff(
        stuff1='foo',
        stuff2='bar',
        stuff3=234,
        stuff4=9,
        stuff6='123',
    )

    assert stuff.stuff5 == 'foobar'
    # 19..21 is not covered by any field
    assert stuff.to_str() == 'foo   bar0002349     foobar 123'


def test_deserialize_stuff():
    stuff = Stuff.from_str('   foo000bar234   9  foobar123 ')

    assert stuff.stuff1 == 'foo'
    assert stuff.stuff2 == '000bar'
    assert stuff.stuff3 == 234
    assert stuff.stuff4 == 9
    assert stuff.stuff5 == 'foobar'
    assert stuff.stuff6 == '123'


def test_deserialize_when_input_is_too_small():
    with pytest.raises(UnexpectedEndOfRecord) as excinfo:
        Stuff.from_str('   foo000bar234   9')

    assert excinfo.value.chain == ['stuff5']


def test_optionals():
    optionals = Optionals(stuff1=None, stuff2='foo', stuff3=23)

    assert optionals.to_str() == '    foo   23   '
    assert Optionals.from_str('    foo   23   ') == optionals
