import io
import logging

from .exceptions import TruncatedException


logger = logging.getLogger(__name__)


class Stream(object):
    '''This is a simple wrapper around the binary data to unpack: it
    uniforms the different kinds of buffers and guarantees that a read
    never goes past the end of the data.

    No file access happens here, the caller hands us the bytes.'''
    def __init__(self, obj):
        '''Here we normalize the object in order to be accessed as a normal file object'''
        self._type = type(obj)
        self.obj = obj

        init_method_name = 'init_%s' % self.obj.__class__.__name__

        init_method = getattr(self, init_method_name, None)

        if init_method is None:
            raise ValueError('\'%s\' is the wrong kind of object to stream' % self._type.__name__)

        init_method()

        self.size = self.obj.seek(0, io.SEEK_END)
        self.obj.seek(0)

    def __repr__(self):
        return '<%s(%s, size=%d)>' % (self.__class__.__name__, self._type.__name__, self.size)

    def init_bytes(self):
        '''We think these are raw bytes'''
        self.obj = io.BytesIO(self.obj)

    def init_bytearray(self):
        self.obj = io.BytesIO(bytes(self.obj))

    def init_memoryview(self):
        self.obj = io.BytesIO(self.obj.tobytes())

    def tell(self):
        return self.obj.tell()

    def remaining(self):
        return self.size - self.tell()

    def is_exhausted(self):
        return self.remaining() <= 0

    def read(self, n):
        '''Read exactly n bytes or raise TruncatedException without
        consuming anything.'''
        offset = self.tell()

        if n > self.remaining():
            logger.debug('requested %d bytes at offset %d but only %d available', n, offset, self.remaining())
            raise TruncatedException(offset=offset)

        return self.obj.read(n)

    def write(self, data):
        written = self.obj.write(data)
        self.size = max(self.size, self.tell())

        return written

    def getvalue(self):
        return self.obj.getvalue()
