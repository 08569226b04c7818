'''
We are implementing fields to handle CRC calculation.
'''
import logging
from zlib import crc32

from .. import fields
from ..exceptions import CRCMismatchException


logger = logging.getLogger(__name__)


class CRCField(fields.StructField):
    """standard CRC methods with pre and post conditioning, as defined by ISO 3309 [ISO-3309]
    or ITU-T V.42 [ITU-V42]. The CRC polynomial employed is

      x^32+x^26+x^23+x^22+x^16+x^12+x^11+x^10+x^8+x^7+x^5+x^4+x^2+x+1

    The 32-bit CRC register is initialized to all 1's, and then the data from each byte is processed
    from the least significant bit (1) to the most significant bit (128). After all the data bytes are processed,
    the CRC register is inverted (its ones complement is taken). This value is transmitted (stored in the file)
    MSB first.

    See <https://www.w3.org/TR/PNG-Structure.html#CRC-algorithm>.

    The fields argument lists the names of the sibling fields covered by the
    checksum: they must precede this field so that, when unpacking, their
    values are already available for the verification.
    """

    def __init__(self, fields, *args, **kwargs):
        super().__init__('I', *args, **kwargs)
        self.fields = fields

    def calculate(self):
        value = b''.join(getattr(self.father, field_name).raw for field_name in self.fields)

        return crc32(value)

    def update(self):
        self.value = self.calculate()

    def _unpack(self, raw):
        value = super()._unpack(raw)
        expected = self.calculate()

        if value != expected:
            logger.debug('stored CRC 0x%08x but calculated 0x%08x', value, expected)
            raise CRCMismatchException(msg=f"calculated CRC 0x{expected:08x} doesn't match with chunk CRC 0x{value:08x}")

        return value
