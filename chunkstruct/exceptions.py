class ChunkstructException(Exception):
    '''Base class to extend in order to throw exception in chunkstruct.

    It takes the chain of the layers that caused the exception: the list
    is filled from the innermost field outwards while the exception
    propagates, so that the final message indicates the full path of
    the failing field (like "chunks[3].crc"). The offset, when known, is
    the position in the stream where the failure was detected.
    '''
    description = 'generic error'

    def __init__(self, chain=None, offset=None, msg=None):
        self.chain = chain if chain is not None else []
        self.offset = offset
        self.msg = msg
        super().__init__()

    @property
    def path(self):
        components = []
        for name in reversed(self.chain):
            if components and not name.startswith('['):
                components.append('.')
            components.append(name)

        return ''.join(components)

    def __str__(self):
        message = self.msg or self.description

        if self.chain:
            message = f'{message} at {self.path}'

        if self.offset is not None:
            message = f'{message} (offset 0x{self.offset:x})'

        return message


class UnpackException(ChunkstructException):
    description = 'unable to unpack'


class InvalidChunkTypeException(UnpackException):
    description = 'chunk type must be 4 ASCII alphabetic characters'


class TruncatedException(UnpackException):
    description = 'data ended before the field could be read'


class CRCMismatchException(UnpackException):
    description = "calculated CRC doesn't match with chunk CRC"


class TrailingDataException(UnpackException):
    description = 'unexpected data after the end of the chunk'


class MagicException(UnpackException):
    description = "file header doesn't match with standard PNG header"


class TooSmallException(UnpackException):
    description = 'data too small to be a PNG file'


class TerminatorException(UnpackException):
    description = 'IEND chunk missing or not at the end of the file'


class ContainerException(ChunkstructException):
    '''Precondition failed while modifying the chunks of a file.'''
    description = 'unable to modify the chunks'


class DuplicateChunkException(ContainerException):
    description = 'chunk type already present'


class ChunkNotFoundException(ContainerException):
    description = 'chunk type not found'


class EncodingException(ChunkstructException):
    description = 'failed to convert chunk data to UTF-8 string'


class UnmodifiableChunkException(ChunkstructException):
    '''The chunk type is critical, public or unsafe to copy and so it
    cannot be used to carry a message.'''
    description = 'chunk type is not safe to modify'
