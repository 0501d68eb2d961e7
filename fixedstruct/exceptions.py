class FixedStructException(Exception):
    '''Base class to extend in order to throw exception in fixedstruct.

    Other than the message it keeps the chain of the members (record attributes,
    sequence indexes) that were being processed when the failure happened,
    outermost first.
    '''

    def __init__(self, message=None, chain=None):
        self.message = message
        self.chain = chain if chain is not None else []
        super().__init__(message)

    def __str__(self):
        msg = self.message or self.default_message()
        if self.chain:
            msg = '%s (at %s)' % (msg, '.'.join(str(_) for _ in self.chain))

        return msg

    def default_message(self):
        return self.__class__.__name__

    def within(self, member):
        '''Prepend the member the error comes from, while unwinding.'''
        self.chain.insert(0, member)
        return self


class UnexpectedEndOfRecord(FixedStructException):
    '''The record is shorter than the fields need, or the fields ran out.'''

    def default_message(self):
        return 'byte length of record was less than defined length'


class InvalidUtf8(FixedStructException):
    pass


class BooleanParseError(FixedStructException):
    pass


class IntegerParseError(FixedStructException):
    pass


class FloatParseError(FixedStructException):
    pass


class UnsupportedShape(FixedStructException):
    '''The shape requested is something the format doesn't know how to handle.'''
    pass


class WontImplement(UnsupportedShape):
    '''fixed width data is not self describing, some things will never work.'''

    def default_message(self):
        return 'This will never be implemented.'


class MessageError(FixedStructException):
    '''Custom failure, usually coming from the validation of the destination type.'''
    pass
