"""UTF-8 byte classification"""


def is_continuation_byte(byte: int) -> bool:
    """Return True for a non-leading byte of a multi-byte sequence (0b10xxxxxx)."""
    return byte & 0xC0 == 0x80
