from enum import Enum


class Justify(Enum):
    '''Which side of a field the content sticks to: the padding goes on the other one.'''
    LEFT  = 'left'
    RIGHT = 'right'

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value

        try:
            return cls(value.strip().lower())
        except (AttributeError, ValueError):
            raise ValueError(f"justify must be 'left' or 'right', not {value!r}")


class LineBreak(Enum):
    '''Separator between records in a stream'''
    NONE    = b''
    NEWLINE = b'\n'
    CRLF    = b'\r\n'
