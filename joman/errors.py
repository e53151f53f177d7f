# -*- coding: utf-8 -*-
"""Exception hierarchy for joman.

Crypto errors are raised by :mod:`joman.crypto`; :class:`JournalError` is
raised by the file-management layer in :mod:`joman.logic`. The CLI turns any
:class:`JomanError` into a message and a non-zero exit status.
"""
from __future__ import annotations


class JomanError(Exception):
    """Base class for every error raised by joman."""


class CryptoError(JomanError):
    """Base class for key generation, encryption and decryption failures."""


class KeyGenerationError(CryptoError):
    """The keypair could not be generated or serialized."""


class EncryptionError(CryptoError):
    """Bad public key or failure of an encryption primitive."""


class DecryptionError(CryptoError):
    """Wrong key, corrupted or tampered ciphertext."""


class MalformedBlobError(DecryptionError):
    """The blob is not valid base64 or is too short to hold a key and nonce."""


class EncodingError(DecryptionError):
    """The decrypted bytes are not valid UTF-8 text."""


class JournalError(JomanError):
    """Journal directory, key file or entry file problem."""
