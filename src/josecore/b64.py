"""JOSE Base64.

`JOSE Base64`_ is defined as:

  - URL-safe Base64
  - padding stripped

Decoding is strict: padding characters and characters outside of the
URL-safe alphabet are rejected, as is any trailing partial quantum that
cannot come out of an unpadded encoder.


.. _`JOSE Base64`:
    https://datatracker.ietf.org/doc/html/rfc7515#appendix-C

.. Do NOT try to call this module "base64", as it will "shadow" the
   standard library.

"""
import base64
import binascii
import re
from typing import Union

_ALPHABET_RE = re.compile(rb'\A[A-Za-z0-9_-]*\Z')


def b64encode(data: bytes) -> bytes:
    """JOSE Base64 encode.

    :param data: Data to be encoded.
    :type data: bytes

    :returns: JOSE Base64 string.
    :rtype: bytes

    :raises TypeError: if ``data`` is of incorrect type

    """
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError('argument should be bytes')
    return base64.urlsafe_b64encode(bytes(data)).rstrip(b'=')


def b64decode(data: Union[bytes, str]) -> bytes:
    """JOSE Base64 decode.

    :param data: Base64 string to be decoded. If it's a ``str``, then
                 only ASCII characters are allowed.
    :type data: bytes or str

    :returns: Decoded data.
    :rtype: bytes

    :raises TypeError: if input is of incorrect type
    :raises ValueError: if input is not unpadded URL-safe Base64

    """
    if isinstance(data, str):
        try:
            data = data.encode('ascii')
        except UnicodeEncodeError:
            raise ValueError(
                'unicode argument should contain only ASCII characters')
    elif not isinstance(data, bytes):
        raise TypeError('argument should be a str or bytes')

    if not _ALPHABET_RE.match(data):
        raise ValueError('argument contains characters outside of the '
                         'unpadded URL-safe alphabet')
    if len(data) % 4 == 1:
        raise ValueError('argument has an impossible length')

    try:
        decoded = base64.urlsafe_b64decode(data + b'=' * (-len(data) % 4))
    except binascii.Error as error:
        raise ValueError(str(error))
    # non-canonical encodings (stray low bits in the last symbol) would
    # otherwise decode to the same bytes as their canonical form
    if b64encode(decoded) != data:
        raise ValueError('argument is not canonically encoded')
    return decoded
