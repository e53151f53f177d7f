# -*- coding: utf-8 -*-
"""Key generation and hybrid encryption for joman.

This module is *stateless*: callers pass key material in and get text or
bytes back. It does no file I/O and never logs.

Blob layout (base64 encoded as a whole)::

    RSA-encrypted AES key (256) | nonce (12) | AES-256-GCM ciphertext + tag
"""
from __future__ import annotations

from typing import Tuple, Union
import base64
import binascii
import secrets

from cryptography.exceptions import InternalError, InvalidTag, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .errors import (
    DecryptionError,
    EncodingError,
    EncryptionError,
    KeyGenerationError,
    MalformedBlobError,
)

# ---------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------

RSA_KEY_SIZE = 2048
RSA_PUBLIC_EXPONENT = 65537
RSA_BLOCK_SIZE = RSA_KEY_SIZE // 8

AES_KEY_LEN = 32
NONCE_LEN = 12
TAG_LEN = 16

MIN_BLOB_LEN = RSA_BLOCK_SIZE + NONCE_LEN

KeyText = Union[str, bytes]


def _oaep() -> padding.OAEP:
    return padding.OAEP(
        mgf=padding.MGF1(algorithm=hashes.SHA256()),
        algorithm=hashes.SHA256(),
        label=None,
    )


def _as_bytes(value: KeyText) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else value


# ---------------------------------------------------------------------
# Key management
# ---------------------------------------------------------------------

def generate_keypair() -> Tuple[str, str]:
    """Generate a fresh RSA-2048 keypair; return (private_pem, public_pem).

    The private half is PKCS#8, the public half SubjectPublicKeyInfo. Both
    are unencrypted PEM text. Nothing is kept after the call returns.
    """
    try:
        private_key = rsa.generate_private_key(
            public_exponent=RSA_PUBLIC_EXPONENT,
            key_size=RSA_KEY_SIZE,
        )
        private_pem = private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
        public_pem = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    except (ValueError, InternalError, UnsupportedAlgorithm) as exc:
        raise KeyGenerationError(f"Failed to generate RSA keypair: {exc}") from exc
    return private_pem.decode("ascii"), public_pem.decode("ascii")


def load_public_key(public_pem: KeyText) -> rsa.RSAPublicKey:
    """Parse a PEM public key and check it fits the blob framing."""
    try:
        key = serialization.load_pem_public_key(_as_bytes(public_pem))
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise EncryptionError(f"Invalid RSA public key: {exc}") from exc
    if not isinstance(key, rsa.RSAPublicKey):
        raise EncryptionError("Invalid RSA public key: not an RSA key")
    if key.key_size != RSA_KEY_SIZE:
        raise EncryptionError(
            f"Invalid RSA public key: expected {RSA_KEY_SIZE} bits, got {key.key_size}"
        )
    return key


def load_private_key(private_pem: KeyText) -> rsa.RSAPrivateKey:
    """Parse an unencrypted PEM private key (PKCS#8 or PKCS#1)."""
    try:
        key = serialization.load_pem_private_key(_as_bytes(private_pem), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise DecryptionError(f"Invalid RSA private key: {exc}") from exc
    if not isinstance(key, rsa.RSAPrivateKey):
        raise DecryptionError("Invalid RSA private key: not an RSA key")
    return key


# ---------------------------------------------------------------------
# Hybrid encryption
# ---------------------------------------------------------------------

def encrypt(plaintext: Union[str, bytes], public_pem: KeyText) -> str:
    """Encrypt *plaintext* for the holder of *public_pem*; return base64 text."""
    data = plaintext.encode("utf-8") if isinstance(plaintext, str) else plaintext
    public_key = load_public_key(public_pem)

    aes_key = AESGCM.generate_key(bit_length=AES_KEY_LEN * 8)
    nonce = secrets.token_bytes(NONCE_LEN)
    try:
        aes_ct = AESGCM(aes_key).encrypt(nonce, data, None)
    except (ValueError, OverflowError) as exc:
        raise EncryptionError(f"AES encryption failed: {exc}") from exc

    try:
        enc_key = public_key.encrypt(aes_key, _oaep())
    except ValueError as exc:
        raise EncryptionError(f"RSA encryption failed: {exc}") from exc

    return base64.b64encode(enc_key + nonce + aes_ct).decode("ascii")


def split_blob(blob: Union[str, bytes]) -> Tuple[bytes, bytes, bytes]:
    """Decode *blob* and return (encrypted_key, nonce, ciphertext)."""
    try:
        raw = base64.b64decode(_as_bytes(blob).strip(), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedBlobError(f"Base64 decoding failed: {exc}") from exc
    if len(raw) < MIN_BLOB_LEN:
        raise MalformedBlobError("Invalid ciphertext length")
    return raw[:RSA_BLOCK_SIZE], raw[RSA_BLOCK_SIZE:MIN_BLOB_LEN], raw[MIN_BLOB_LEN:]


def _unwrap_key(private_key: rsa.RSAPrivateKey, enc_key: bytes) -> bytes:
    # Entries from joman < 0.4 wrap the AES key with PKCS#1 v1.5.
    for scheme in (_oaep(), padding.PKCS1v15()):
        try:
            aes_key = private_key.decrypt(enc_key, scheme)
        except ValueError:
            continue
        if len(aes_key) == AES_KEY_LEN:
            return aes_key
    raise DecryptionError("RSA decryption failed")


def decrypt_bytes(blob: Union[str, bytes], private_pem: KeyText) -> bytes:
    """Recover the raw plaintext bytes of *blob*."""
    enc_key, nonce, aes_ct = split_blob(blob)
    private_key = load_private_key(private_pem)
    aes_key = _unwrap_key(private_key, enc_key)
    try:
        return AESGCM(aes_key).decrypt(nonce, aes_ct, None)
    except InvalidTag as exc:
        raise DecryptionError("AES decryption failed: authentication failed") from exc


def decrypt(blob: Union[str, bytes], private_pem: KeyText) -> str:
    """Decrypt *blob* with *private_pem* and return the entry text."""
    data = decrypt_bytes(blob, private_pem)
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise EncodingError(f"Entry is not valid UTF-8: {exc}") from exc
