"""
A Field is "fundamental" datatype from the format point of view, something directly
packable/unpackable reading from or writing to a Stream.
"""
import logging
import struct

from .meta import FieldBase, Endianess
from .properties import Dependency, ChunkPhase
from .exceptions import ChunkstructException, MagicException


logger = logging.getLogger(__name__)


class Field(FieldBase):
    """Base class to subclass from"""

    def __init__(self, name=None, father=None, default=None, endianess=Endianess.LITTLE_ENDIAN, is_magic=False):
        super().__init__()
        self._phase = ChunkPhase.INIT
        self.name = name
        self.father = father
        self.default = default
        self.offset = None
        self.endianess = endianess
        self.is_magic = is_magic

        self.init()

    def init(self):
        self._value = self.value_from_default()

    def value_from_default(self):
        return self.default

    def __str__(self):
        return str(self.value)

    def _get_value(self):
        return self._value

    def _set_value(self, value) -> None:
        self._value = value

    def _check_and_set_value(self, value) -> None:
        if self.is_sealed():
            raise AttributeError(f"field '{self.name}' belongs to a sealed chunk")

        self._set_value(value)

    value = property(
        fget=lambda self: self._get_value(),
        fset=lambda self, value: self._check_and_set_value(value))

    def _get_size(self):
        raise NotImplementedError(f"method {self.__class__.__name__}._get_size() not implemented")

    size = property(
        fget=lambda self: self._get_size(),
    )

    def _get_raw(self) -> bytes:
        raise NotImplementedError(f"method {self.__class__.__name__}._get_raw() not implemented")

    raw = property(
        fget=lambda self: self._get_raw(),
    )

    def _unpack(self, raw: bytes):
        '''Transform the raw bytes read from the stream into the value of the field'''
        raise NotImplementedError(f"method {self.__class__.__name__}._unpack() not implemented")

    def pack(self, stream):
        self.offset = stream.tell()
        stream.write(self.raw)

    def unpack(self, stream):
        old_phase = self._phase
        self._phase = ChunkPhase.UNPACKING
        self.offset = stream.tell()

        try:
            value = self._unpack(stream.read(self._get_unpack_size()))

            if self.is_magic and value != self.default:
                logger.debug('the magic doesn\'t correspond: %r', value)
                raise MagicException()
        except ChunkstructException as e:
            if e.offset is None:
                e.offset = self.offset
            raise

        self._value = value
        self._phase = old_phase

    def _get_unpack_size(self):
        return self.size


class StructField(Field):
    """
    Simplest of the fields: mimic the behaviour of the struct module packing/unpacking
    integers to/from bytes.
    """

    def __init__(self, format, default=0, **kw):
        self.format = format
        super().__init__(default=default, **kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, hex(self.value))

    def get_format(self):
        return '%s%s' % ('<' if self.endianess == Endianess.LITTLE_ENDIAN else '>', self.format)

    def _set_value(self, value) -> None:
        try:
            struct.pack(self.get_format(), value)
        except struct.error as e:
            raise ValueError(f"value {value!r} doesn't fit into field '{self.name}' ({self.get_format()})") from e

        super()._set_value(value)

    def _get_size(self):
        return struct.calcsize(self.get_format())

    def _get_raw(self) -> bytes:
        return struct.pack(self.get_format(), self.value)

    def _unpack(self, raw):
        return struct.unpack(self.get_format(), raw)[0]


class StringField(Field):
    """Represent a contiguous chunk of bytes.

    The length can be fixed or a Dependency from another field: in the
    latter case setting the value writes back its length into the other field.
    """

    def __init__(self, n=None, **kw):
        if n is None and 'default' not in kw:
            raise ValueError(f"StringField must have 'n' or 'default' indicated!")

        self._n = n if n is not None else len(kw['default'])

        super().__init__(**kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, repr(self.value))

    def __len__(self):
        return len(self.value)

    @property
    def length(self):
        if isinstance(self._n, Dependency):
            return self._n.resolve(self)

        return self._n

    def value_from_default(self):
        if self.default is not None:
            return self.default

        return b'' if isinstance(self._n, Dependency) else b'\x00' * self._n

    def _set_value(self, value) -> None:
        value = bytes(value)

        if isinstance(self._n, Dependency):
            self._n.resolve_and_set(self, len(value))
        elif len(value) != self._n:
            raise ValueError(f'you are trying to set a value with the wrong size (that is {self._n} bytes)')

        super()._set_value(value)

    def _get_size(self):
        return len(self.value)

    def _get_unpack_size(self):
        return self.length

    def _get_raw(self):
        return self.value

    def _unpack(self, raw):
        return raw


class ArrayField(Field):
    '''Un/Pack an array of Chunks: when unpacking the elements are read until
    the stream is exhausted.

    This class must behave like a list in python but the value is a read-only
    view, the only way to modify it is via insert() and pop().
    '''

    def __init__(self, field_cls, **kw):
        self.field_cls = field_cls
        super().__init__(**kw)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.value!r})>'

    def __getitem__(self, item):
        return self._value[item]

    def __len__(self):
        return len(self._value)

    def __iter__(self):
        return iter(self._value)

    def value_from_default(self):
        return []

    def _get_value(self):
        return tuple(self._value)

    def _set_value(self, value):
        elements = list(value)
        for element in elements:
            element.father = self

        super()._set_value(elements)

    def _get_raw(self):
        return b''.join(element.raw for element in self._value)

    def _get_size(self):
        return sum(element.size for element in self._value)

    def instance_element(self):
        return self.field_cls(father=self)  # pass the father so that we don't lose the hierarchy

    def insert(self, index, element):
        if self.is_sealed():
            raise AttributeError(f"field '{self.name}' belongs to a sealed chunk")

        element.father = self
        self._value.insert(index, element)

    def pop(self, index):
        if self.is_sealed():
            raise AttributeError(f"field '{self.name}' belongs to a sealed chunk")

        element = self._value.pop(index)
        element.father = None

        return element

    def pack(self, stream):
        self.offset = stream.tell()
        for element in self._value:
            element.pack(stream)

    def unpack(self, stream):
        self.offset = stream.tell()
        elements = []

        while not stream.is_exhausted():
            logger.debug('unpacking element %d of \'%s\' at offset %d', len(elements), self.name, stream.tell())
            element = self.instance_element()

            try:
                element.unpack(stream)
            except ChunkstructException as e:
                e.chain.append(f'[{len(elements)}]')
                raise

            elements.append(element)

        self._value = elements
