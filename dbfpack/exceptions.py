class DBFPackException(Exception):
    '''Base class to extend in order to throw exception in dbfpack.

    It takes as argument the chain of the layers that caused the exception,
    innermost first; a layer catching the exception can append its own name
    before re-raising so that the path to the failing element is preserved.
    '''

    def __init__(self, message='', chain=None):
        self.chain = chain if chain is not None else []
        self.message = message
        super().__init__(message)

    def __str__(self):
        if not self.chain:
            return self.message

        return '%s (at %s)' % (self.message, '.'.join(reversed([str(_) for _ in self.chain])))


class PackException(DBFPackException):
    '''A field was not able to encode its value.'''
    pass


class InvalidInput(DBFPackException, ValueError):
    '''A value has not a shape accepted by the field it's destined to.'''
    pass


class MissingField(DBFPackException, KeyError):
    '''A record doesn't contain a value for a field declared in the schema.'''


class UnsupportedFieldType(DBFPackException, ValueError):
    pass


class InvalidSchema(DBFPackException, ValueError):
    '''The schema violates one of the bounds imposed by the format.'''
    pass


class WriteException(DBFPackException, OSError):
    '''The destination refused the data.'''
    pass
