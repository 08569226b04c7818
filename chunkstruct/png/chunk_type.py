'''
# Chunk type codes

A type code is made of 4 bytes, restricted to the ASCII letters: four bits of
it, namely bit 5 (value 32) of each byte, are used to convey chunk properties.
In practice the property can be determined by testing whether each letter of
the type code is uppercase (bit 5 is 0) or lowercase (bit 5 is 1).

 1. ancillary bit (first byte): 0 is critical, 1 is ancillary
 2. private bit (second byte): 0 is public, 1 is private
 3. reserved bit (third byte): must be 0 in conforming files
 4. safe-to-copy bit (fourth byte): 0 is unsafe to copy, 1 is safe to copy

See <http://www.libpng.org/pub/png/spec/1.2/PNG-Structure.html#Chunk-naming-conventions>.
'''
import string

from bitstring import Bits

from .. import fields
from ..exceptions import InvalidChunkTypeException, EncodingException


ALLOWED_BYTES = frozenset(string.ascii_letters.encode('ascii'))


class ChunkType(object):
    '''Immutable 4-byte chunk type code, use from_bytes() or from_string() at the
    boundaries where raw data or user input becomes typed.'''
    __slots__ = ('_code',)

    SIZE = 4
    PROPERTY_BIT = 2  # bit 5 (0x20) counted from the most significant one

    def __init__(self, code: bytes):
        try:
            code = bytes(code)
        except TypeError as e:
            raise InvalidChunkTypeException(msg=f'invalid chunk type {code!r}: expected bytes') from e

        if len(code) != self.SIZE or not ALLOWED_BYTES.issuperset(code):
            raise InvalidChunkTypeException(msg=f'invalid chunk type {code!r}: expected 4 ASCII alphabetic bytes')

        object.__setattr__(self, '_code', code)

    def __setattr__(self, name, value):
        raise AttributeError(f"'{self.__class__.__name__}' is immutable")

    def __reduce__(self):
        return (self.__class__, (self._code,))

    @classmethod
    def from_bytes(cls, code: bytes) -> 'ChunkType':
        return cls(code)

    @classmethod
    def from_string(cls, code: str) -> 'ChunkType':
        if not isinstance(code, str) or len(code) != cls.SIZE or not all(_ in string.ascii_letters for _ in code):
            raise InvalidChunkTypeException(msg=f'invalid chunk type {code!r}: expected 4 ASCII alphabetic characters')

        return cls.from_bytes(code.encode('ascii'))

    @property
    def raw(self) -> bytes:
        return self._code

    def __bytes__(self):
        return self._code

    def __eq__(self, other):
        if not isinstance(other, ChunkType):
            return NotImplemented

        return self._code == other._code

    def __hash__(self):
        return hash(self._code)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, repr(self._code))

    def __str__(self):
        try:
            return self._code.decode('utf-8')
        except UnicodeDecodeError as e:
            raise EncodingException(msg=f'chunk type {self._code!r} is not a valid string') from e

    def _property_bit(self, index: int) -> bool:
        return Bits(self._code)[index * 8 + self.PROPERTY_BIT]

    def is_critical(self) -> bool:
        return not self._property_bit(0)

    def is_public(self) -> bool:
        return not self._property_bit(1)

    def is_reserved_bit_valid(self) -> bool:
        return not self._property_bit(2)

    def is_safe_to_copy(self) -> bool:
        return self._property_bit(3)

    def is_valid(self) -> bool:
        '''The letters are always valid by construction, so only the reserved bit
        can make the type code not conforming.'''
        return self.is_reserved_bit_valid()

    def is_modifiable(self) -> bool:
        '''A chunk is safe to be used as carrier of arbitrary data only if it's
        ancillary, private, has a valid reserved bit and is safe-to-copy: any
        other chunk is part of the image structure.'''
        return (
            not self.is_critical()
            and not self.is_public()
            and self.is_reserved_bit_valid()
            and self.is_safe_to_copy()
        )


class ChunkTypeField(fields.Field):
    '''Field containing a ChunkType: it can be set with a ChunkType or with a string.'''

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, repr(self.value))

    def _set_value(self, value):
        if isinstance(value, str):
            value = ChunkType.from_string(value)
        elif not isinstance(value, ChunkType):
            value = ChunkType.from_bytes(value)

        super()._set_value(value)

    def _get_size(self):
        return ChunkType.SIZE

    def _get_raw(self):
        if self.value is None:
            raise ValueError(f"field '{self.name}' has no chunk type set")

        return self.value.raw

    def _unpack(self, raw):
        return ChunkType.from_bytes(raw)
