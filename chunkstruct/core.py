"""
Core module for the abstraction of a file format

"""
import logging
from typing import Tuple, List

from .fields import Field
from .meta import MetaChunk
from .streams import Stream
from .exceptions import ChunkstructException
from .properties import ChunkPhase


logger = logging.getLogger(__name__)


class Chunk(Field, metaclass=MetaChunk):
    """
    Together with Field is the main class that defines a format: it's an ordered
    collection of fields, declared as class attributes, that are unpacked from
    a stream one after the other.

    A Chunk can contain sub-chunks, simply declare an instance of another
    Chunk subclass as a field.

    When some data is passed to the constructor, it is unpacked immediately
    and any failure propagates: there is no such thing as a partially
    unpacked chunk.
    """

    def __init__(self, data=None, **kwargs):
        super().__init__(**kwargs)

        if data is not None:
            stream = data if isinstance(data, Stream) else Stream(data)
            logger.debug('unpacking \'%s\' from %s', self.__class__.__name__, stream)
            self.unpack(stream)

    def get_ordered_fields_name(self) -> List[str]:
        return self._meta.fields

    def get_fields(self) -> List[Tuple[str, Field]]:
        '''It returns a list of couples (name, instance) for each field.'''
        return [(_, getattr(self, _)) for _ in self.get_ordered_fields_name()]

    def __repr__(self):
        msg = []
        for field_name, field in self.get_fields():
            msg.append('%s=%s' % (field_name, repr(field)))
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(msg))

    def __str__(self):
        msg = ''
        for field_name, field in self.get_fields():
            msg += '%s: %s\n' % (field_name, repr(field))
        return msg

    def init(self):
        for _, field in self.get_fields():
            field.init()

    def _get_value(self):
        return self

    def _set_value(self, value):
        raise AttributeError(f"cannot assign directly to the chunk '{self.__class__.__name__}'")

    def seal(self):
        '''From now on no field of this chunk can be set'''
        self._phase = ChunkPhase.DONE

    def _get_size(self):
        '''the size parameter MUST not be set but MUST be derived from the subchunks'''
        return sum(field.size for _, field in self.get_fields())

    def _get_raw(self):
        return b''.join(field.raw for _, field in self.get_fields())

    def pack(self, stream=None):
        '''Encode the chunk writing each field one after the other: the offsets
        of the fields are updated to reflect the position in the stream.

        It returns the data packed so far.'''
        stream = Stream(b'') if stream is None else stream
        self.offset = stream.tell()

        for field_name, field_instance in self.get_fields():
            logger.debug('packing %s.%s at offset %08x', self.__class__.__name__, field_name, stream.tell())
            field_instance.pack(stream)

        return stream.getvalue()

    def unpack(self, stream):
        '''This is one of the main APIs to take care of: its aim is to take a binary
        data and transform in the representation given by the class this method
        is implemented.

        Each field is unpacked in order of declaration; when a field fails the
        exception is enriched with the name of the field so that the caller
        knows which is the culprit.

        Once all the fields are in place the method validate(), if defined,
        is called to check the constraints spanning more fields.
        '''
        self._phase = ChunkPhase.UNPACKING
        self.offset = stream.tell()

        for field_name, field in self.get_fields():
            logger.debug('unpacking %s.%s at offset %d', self.__class__.__name__, field_name, stream.tell())

            try:
                field.unpack(stream)
            except ChunkstructException as e:
                e.chain.append(field_name)
                raise

        if hasattr(self, 'validate'):
            self.validate()

        self._phase = ChunkPhase.INIT
