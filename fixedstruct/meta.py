import copy
import logging
from typing import Dict, List, Optional, Union

from .enum import Justify
from .fields import DEFAULT_PAD, FieldGroup, FieldSpec, parse_range


class Declaration(object):
    '''Something that, assigned to an attribute of a Record, becomes a member of it.'''

    def __init__(self, default=None):
        self.default = default
        self.attname: Optional[str] = None

    def contribute_to_record(self, cls, name):
        if name in cls._meta.declarations:
            raise AttributeError(f'field {name} is already present in class {cls.__name__}')

        self.attname = name
        cls._meta.add(name, self)

    def get_default(self):
        return copy.deepcopy(self.default)

    @property
    def skip(self) -> bool:
        return False

    def build(self, hint) -> Union[FieldSpec, FieldGroup]:
        raise NotImplementedError(f"method {self.__class__.__name__}.build() not implemented")


class Field(Declaration):
    """Declare the member as a single field of the record:

        class Person(Record):
            name: str = Field(range="0..6")
            age: int = Field(range="6..9", pad_with="0")
            height: int = Field(range="9..11", name="height_cm", justify="right")
            gender: str = Field(skip=True, default="")

    "name" defaults to the name of the attribute; a skipped member is not
    part of the record and it gets its default when unpacking.
    """

    def __init__(self, range=None, pad_with=DEFAULT_PAD, justify='left', name=None, skip=False, default=None):
        super().__init__(default=default)

        self._skip = skip
        self.range = parse_range(range) if range is not None else None

        if self.range is None and not skip:
            raise ValueError('Must supply a byte range for the field')

        if not isinstance(pad_with, str) or len(pad_with) != 1:
            raise ValueError(f'pad_with must be a single character, not {pad_with!r}')

        self.pad_with = pad_with
        self.justify = Justify.parse(justify)
        self.name = name

    def __repr__(self):
        return '<%s(%r)>' % (self.__class__.__name__, self.range)

    @property
    def skip(self) -> bool:
        return self._skip

    def build(self, hint) -> FieldSpec:
        start, end = self.range
        return FieldSpec(
            start, end,
            name=self.name if self.name is not None else self.attname,
            pad_with=self.pad_with,
            justify=self.justify,
        )


class Nested(Declaration):
    '''Declare the member as another Record embedded as a group, its ranges
    moved forward by "offset".'''

    def __init__(self, offset=0, default=None):
        super().__init__(default=default)
        self.offset = offset

    def __repr__(self):
        return '<%s(offset=%d)>' % (self.__class__.__name__, self.offset)

    def build(self, hint) -> FieldGroup:
        if not hasattr(hint, 'fields'):
            raise TypeError(f'the member {self.attname} must be annotated with a Record, not {hint!r}')

        return hint.fields().shift(self.offset)


class Meta(object):
    """Class containing metadata about the record"""

    def __init__(self):
        self.fields: List[str] = []
        self.declarations: Dict[str, Declaration] = {}
        self.field_tree: Optional[FieldGroup] = None
        self.shape = None

    def add(self, name, declaration):
        self.fields.append(name)
        self.declarations[name] = declaration

    @property
    def members(self) -> List[str]:
        '''The names of the members that are actually in the record'''
        return [_ for _ in self.fields if not self.declarations[_].skip]


class MetaRecord(type):

    logger = logging.getLogger(__name__)

    def __new__(cls, name, bases, attrs):
        '''Collect the declarations, in order, and leave the rest to the class.'''
        new_attrs = {}
        declarations = []
        for obj_name, obj in attrs.items():
            if hasattr(obj, 'contribute_to_record'):
                declarations.append((obj_name, obj))
            else:
                new_attrs[obj_name] = obj

        new_cls = super(MetaRecord, cls).__new__(cls, name, bases, new_attrs)

        new_cls._meta = Meta()

        # handle inheritance
        parents = [_ for _ in bases if isinstance(_, MetaRecord)]
        for parent in parents:
            for obj_name in parent._meta.fields:
                if obj_name not in new_cls._meta.declarations:
                    new_cls._meta.add(obj_name, parent._meta.declarations[obj_name])

        for obj_name, obj in declarations:
            cls.logger.debug('contribute_to_record() found for field \'%s\'' % obj_name)
            obj.contribute_to_record(new_cls, obj_name)

        return new_cls
