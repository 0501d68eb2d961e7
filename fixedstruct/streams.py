"""
Sources and sinks of records.

Reader splits a bigger source in single records, Writer accumulates
packed records into memory or a file. Both accept paths, bytes (only
for the reader) or binary file objects.
"""
import io
import logging
import os
from typing import Iterator, Optional

from .enum import LineBreak
from .exceptions import InvalidUtf8, UnexpectedEndOfRecord


logger = logging.getLogger(__name__)


class _Wrapper(object):
    '''Normalize the object passed so to be accessed as a normal binary file object'''

    def __init__(self, obj, flags):
        self.flags = flags
        self.obj = obj
        self._owned = False

        # paths are opened here, so they must be closed here
        if isinstance(obj, (str, os.PathLike)):
            init_method_name = 'init_path'
        else:
            init_method_name = 'init_%s' % self.obj.__class__.__name__

        init_method = getattr(self, init_method_name, None)
        if init_method:
            init_method()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def init_path(self):
        logger.debug('opening path \'%s\'' % self.obj)
        self.obj = open(self.obj, self.flags)
        self._owned = True

    def close(self):
        if self._owned:
            self.obj.close()
            self._owned = False


class Reader(_Wrapper):
    """Iterate over the records of a source.

    With a width each record is that many bytes, followed by the line break
    (if any); without a width the records are the lines of the source.

        for record in Reader(b"0OHIO1 BOB").width(5):
            ...
    """

    def __init__(self, source, width: Optional[int] = None, linebreak: LineBreak = LineBreak.NONE):
        super().__init__(source, 'rb')
        self._width = width
        self._linebreak = linebreak
        self._exhausted = False

    def init_bytes(self):
        self.obj = io.BytesIO(self.obj)

    def init_bytearray(self):
        self.obj = io.BytesIO(bytes(self.obj))

    @classmethod
    def from_string(cls, text: str, **kwargs) -> "Reader":
        return cls(text.encode('utf-8'), **kwargs)

    def width(self, width: int) -> "Reader":
        self._width = width
        return self

    def linebreak(self, linebreak: LineBreak) -> "Reader":
        self._linebreak = linebreak
        return self

    def __iter__(self) -> Iterator[bytes]:
        return self

    def __next__(self) -> bytes:
        record = self.next_record()
        if record is None:
            raise StopIteration

        return record

    def next_record(self) -> Optional[bytes]:
        '''Return the next record, None at the end of the source.

        A short final record raises UnexpectedEndOfRecord, then the reader is done.'''
        if self._exhausted:
            return None

        if self._width is None:
            return self._next_line()

        record = self.obj.read(self._width)
        if not record:
            self._exhausted = True
            return None

        if len(record) < self._width:
            self._exhausted = True
            raise UnexpectedEndOfRecord(f'last record is {len(record)} bytes instead of {self._width}')

        self._skip_linebreak()

        return record

    def _skip_linebreak(self):
        separator = self._linebreak.value
        if not separator:
            return

        position = self.obj.tell()
        if self.obj.read(len(separator)) != separator:
            self.obj.seek(position)

    def _next_line(self) -> Optional[bytes]:
        line = self.obj.readline()
        if not line:
            self._exhausted = True
            return None

        for separator in (LineBreak.CRLF.value, LineBreak.NEWLINE.value):
            if line.endswith(separator):
                return line[:-len(separator)]

        return line

    def string_reader(self) -> Iterator[str]:
        for record in self:
            try:
                yield record.decode('utf-8')
            except UnicodeDecodeError as e:
                raise InvalidUtf8(str(e)) from e

    def records(self, target, fields=None) -> Iterator:
        '''Unpack each record; errors are raised at the record that caused them.'''
        from .core import from_bytes

        for record in self:
            yield from_bytes(record, target, fields=fields)


class Writer(_Wrapper):
    """Sink for packed records, in memory when no target is given.

    The line break is written between records."""

    def __init__(self, target=None, linebreak: LineBreak = LineBreak.NONE):
        super().__init__(io.BytesIO() if target is None else target, 'wb')
        self._linebreak = linebreak
        self._count = 0

    @classmethod
    def from_memory(cls, linebreak: LineBreak = LineBreak.NONE) -> "Writer":
        return cls(linebreak=linebreak)

    def write_record(self, record: bytes):
        if self._count:
            self.obj.write(self._linebreak.value)

        self.obj.write(record)
        self._count += 1

    def flush(self):
        self.obj.flush()

    def getvalue(self) -> bytes:
        if not isinstance(self.obj, io.BytesIO):
            raise TypeError('only in-memory writers hold their content')

        return self.obj.getvalue()

    def __bytes__(self):
        return self.getvalue()

    def __str__(self):
        return self.getvalue().decode('utf-8')
