"""Shortcode and link hash generation utilities

This module provides the two pure building blocks of link identity:
random base62 shortcode candidates and the deterministic link hash.

Functions:
    generate_shortcode(length=8, timestamp=None, entropy=None):
        Generate a random base62 candidate suitable for use as a URL slug.

    link_hash(domain, shortcode):
        Derive the internal, globally unique lookup key of a link.

Example:
    >>> from edgeshortener.utils import generate_shortcode, link_hash
    >>> code = generate_shortcode(8)
    >>> len(code)
    8
    >>> link_hash('s.example.com', 'abc123')
    '3f1c0e...'
"""

import hashlib
import os
import time

import xxhash

from edgeshortener.constants import SHORTCODE_ALPHABET


ALPHABET = SHORTCODE_ALPHABET
BASE = len(ALPHABET)  # 10 digits + 26 uppercase + 26 lowercase
MAX_LENGTH = 21  # floor(128 / log2(62)) symbols fit into one xxh128 digest


def generate_shortcode(length: int = 8, timestamp: int | None = None, entropy: bytes | None = None) -> str:
    """Generate a random, fixed-length base62 shortcode candidate.

    The candidate is derived from an xxHash-128 digest over a coarse
    (per-second) timestamp mixed with 16 bytes of OS randomness:
    - the timestamp spreads candidates issued at different times;
    - the random bytes make candidates unpredictable and keep concurrent
      writers in the same second apart;
    - hashing avoids monotonic prefixes which would hotspot the store's index.

    Args:
        length (int, optional):
            Number of base62 symbols in the result. Defaults to 8.
        timestamp (int, optional):
            Coarse timestamp (seconds) to mix in. Defaults to the current time.
        entropy (bytes, optional):
            Random bytes to mix in. Defaults to 16 bytes from os.urandom().

    Returns:
        str: A `length`-symbol string over [0-9A-Za-z].

    Raises:
        TypeError: If length isn't an integer.
        ValueError: If length is outside 1..21.

    Example:
        >>> a = generate_shortcode(8, timestamp=1760000000, entropy=b'\\x00' * 16)
        >>> a == generate_shortcode(8, timestamp=1760000000, entropy=b'\\x00' * 16)
        True

    NOTE:
        - Candidates are NOT guaranteed to be unique. Uniqueness is checked by
          the CodeGenerator and ultimately enforced by the store's unique index.
    """
    if not isinstance(length, int) or isinstance(length, bool):
        raise TypeError(f'Length must be of type integer (given type: {type(length)}).')
    if not 1 <= length <= MAX_LENGTH:
        raise ValueError(f'Length must be between 1 and {MAX_LENGTH} (given value: {length}).')

    coarse_ts = int(time.time()) if timestamp is None else int(timestamp)
    entropy = os.urandom(16) if entropy is None else entropy
    seed = xxhash.xxh128_intdigest(coarse_ts.to_bytes(8, 'big', signed=True) + entropy)

    # Custom base62 encoding of the lowest `length` digits of the 128-bit seed
    digits = []
    for _ in range(length):
        seed, remainder = divmod(seed, BASE)
        digits.append(ALPHABET[remainder])
    return ''.join(digits)


def link_hash(domain: str, shortcode: str) -> str:
    """Derive the deterministic lookup key of a link.

    The hash is the lowercase hex SHA-256 digest over '<domain>:<shortcode>'.
    It decouples the public shortcode (which may repeat across domains) from
    the store's internal, globally unique key.

    Args:
        domain (str): domain the shortcode belongs to.
        shortcode (str): public shortcode.

    Returns:
        str: 64 hex characters.

    Example:
        >>> link_hash('s.test', 'abc') == link_hash('s.test', 'abc')
        True
        >>> link_hash('s.test', 'abc') == link_hash('t.test', 'abc')
        False
    """
    return hashlib.sha256(f'{domain}:{shortcode}'.encode('utf-8')).hexdigest()
