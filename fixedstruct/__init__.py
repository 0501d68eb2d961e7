"""
# fixedstruct: fixed width records for humans.

A fixed width record is a line of text where each field lives in a given
byte range, without delimiters. The layout of a record is described by a
tree of fields: the leaves are single fields (a range, an optional name,
the character used to pad and the justification), the inner nodes are
ordered groups of other nodes and model nested records, tuples and arrays.

Two main operations are defined

 1. unpack(): read the bytes of the record walking the tree and build a
    Python value with the shape requested by the caller. The content of
    each field is trimmed before being interpreted.

 2. pack(): write a Python value into the fields of the tree, each field
    padded (or truncated) to exactly its width, at its own position.

The shape of the value can be given as a type annotation (int, Optional[str],
List[Tuple[int, int]], an Enum, a dataclass, ...) or with a Record
subclass, which generates the tree from its declarations:

    class Person(Record):
        name: str = Field(range="0..6")
        age: int = Field(range="6..9", pad_with="0")
        height: int = Field(range="9..11", justify="right")

    Person.from_str("foo   234 9")

"""
from .core import Record, from_bytes, from_str, to_bytes, to_str, to_writer
from .enum import Justify, LineBreak
from .exceptions import (
    FixedStructException,
    UnexpectedEndOfRecord,
    InvalidUtf8,
    BooleanParseError,
    IntegerParseError,
    FloatParseError,
    UnsupportedShape,
    WontImplement,
    MessageError,
)
from .fields import FieldSpec, FieldGroup, field, field_seq, parse_range
from .meta import Field, Nested
from .packing import Packer
from .shapes import Char, shape_for
from .streams import Reader, Writer
from .unpacking import Unpacker
