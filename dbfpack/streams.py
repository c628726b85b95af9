import io
import logging
import os

from .exceptions import WriteException


logger = logging.getLogger(__name__)


class Stream(object):
    '''This is a simple wrapper around bytes/path/file objects to
    uniform their properties: mainly we need to have seek() and write()
    methods that behave the same way whatever is the destination.

    The underlying object is closed on close() only if it was opened by
    the stream itself.'''
    def __init__(self, obj, flags='w'):
        '''Here we normalize the object in order to be accessed as a normal file object'''
        self._type = type(obj)
        self.flags = flags
        self.obj = obj
        self.owned = False

        init_method_name = 'init_%s' % self.obj.__class__.__name__

        init_method = getattr(self, init_method_name, self.init_file)

        init_method()

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, self._type.__name__)

    def __getattr__(self, name):
        return getattr(self.obj, name)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def _mode(self):
        return 'wb' if 'w' in self.flags else 'rb'

    def init_str(self):
        '''We think this is a path'''
        logger.debug('opening path \'%s\' with mode \'%s\'' % (self.obj, self._mode()))
        try:
            self.obj = open(self.obj, self._mode())
        except OSError as e:
            raise WriteException(f'cannot open \'{self.obj}\': {e.strerror}', chain=[os.fspath(self.obj)]) from e
        self.owned = True

    def init_PosixPath(self):
        self.obj = os.fspath(self.obj)
        self.init_str()

    init_WindowsPath = init_PosixPath

    def init_bytes(self):
        '''We think these are raw bytes'''
        self.obj = io.BytesIO(self.obj)
        self.owned = True

    def init_file(self):
        '''Anything else must be already a binary file-like object'''
        if not hasattr(self.obj, 'write'):
            raise ValueError('\'%s\' is the wrong kind of object to use as stream' % self.obj.__class__.__name__)

    def seek(self, offset):
        if not isinstance(offset, int):
            raise ValueError('\'%s\' is the wrong kind of offset to use' % offset.__class__.__name__)

        self.obj.seek(offset)

    def write(self, data):
        try:
            return self.obj.write(data)
        except OSError as e:
            raise WriteException(f'cannot write {len(data)} bytes: {e.strerror}', chain=[repr(self)]) from e

    def getvalue(self) -> bytes:
        '''Return the content of an in-memory stream.'''
        return self.obj.getvalue()

    def close(self):
        if self.owned:
            self.obj.close()
