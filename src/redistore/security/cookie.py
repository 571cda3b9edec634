# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Authenticated cookie encoding with key rotation.

A cookie value is produced in up to two steps:

1. When a block key is configured, the value is encrypted with Fernet
   (AES-128-CBC with its own HMAC).
2. The result is signed and timestamped with an itsdangerous
   ``URLSafeTimedSerializer`` keyed by the hash key and salted with the cookie
   name, so a token minted for one cookie never verifies as another.

Decoding reverses both steps and enforces the configured max age. Every
failure surfaces as :class:`CookieDecodeError`; callers must never trust a
value that did not verify.
"""

from __future__ import annotations

import base64
import hashlib
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from cryptography.fernet import Fernet, InvalidToken
from itsdangerous import BadData, URLSafeTimedSerializer

from redistore.kernel.exceptions import CookieDecodeError, CookieEncodeError

DEFAULT_MAX_AGE = 86400 * 30
DEFAULT_MAX_LENGTH = 4096


@runtime_checkable
class CookieCodec(Protocol):
    """Encodes and decodes a cookie value bound to the cookie name."""

    def encode(self, name: str, value: str) -> str: ...

    def decode(self, name: str, token: str) -> str: ...


class SecureCookie:
    """Signs, and optionally encrypts, cookie values.

    Args:
        hash_key: Secret used to authenticate values. Required.
        block_key: Optional encryption key, either 32 raw bytes or a url-safe
            base64 Fernet key. When omitted, values are signed but readable.
    """

    def __init__(self, hash_key: bytes, block_key: bytes | None = None) -> None:
        if not hash_key:
            raise ValueError("hash key is not set")
        self._hash_key = hash_key
        self._fernet = Fernet(_fernet_key(block_key)) if block_key else None
        self._max_age = DEFAULT_MAX_AGE
        self._max_length = DEFAULT_MAX_LENGTH

    @property
    def encrypted(self) -> bool:
        return self._fernet is not None

    def max_age(self, value: int) -> SecureCookie:
        """Restrict decoded timestamps to *value* seconds; 0 disables the check."""
        self._max_age = value
        return self

    def max_length(self, value: int) -> SecureCookie:
        """Restrict encoded tokens to *value* characters; 0 disables the check."""
        self._max_length = value
        return self

    def encode(self, name: str, value: str) -> str:
        payload = value
        if self._fernet is not None:
            payload = self._fernet.encrypt(value.encode()).decode("ascii")
        token = self._serializer(name).dumps(payload)
        if self._max_length and len(token) > self._max_length:
            raise CookieEncodeError(f"encoded cookie value is too long ({len(token)} > {self._max_length})")
        return token

    def decode(self, name: str, token: str) -> str:
        if self._max_length and len(token) > self._max_length:
            raise CookieDecodeError("the value is too long")
        try:
            payload = self._serializer(name).loads(token, max_age=self._max_age or None)
        except BadData as exc:
            raise CookieDecodeError(f"the value is not valid: {exc}") from exc
        if not isinstance(payload, str):
            raise CookieDecodeError("the value is not valid: unexpected payload type")
        if self._fernet is None:
            return payload
        try:
            return self._fernet.decrypt(payload.encode("ascii")).decode()
        except (InvalidToken, UnicodeError) as exc:
            raise CookieDecodeError("the value could not be decrypted") from exc

    def _serializer(self, name: str) -> URLSafeTimedSerializer:
        return URLSafeTimedSerializer(
            self._hash_key,
            salt=name,
            signer_kwargs={"digest_method": hashlib.sha256},
        )


def _fernet_key(block_key: bytes) -> bytes:
    if len(block_key) == 32:
        return base64.urlsafe_b64encode(block_key)
    return block_key


def codecs_from_pairs(*keys: bytes) -> list[SecureCookie]:
    """Build one codec per (hash key, block key) pair.

    Keys are consumed two at a time; a trailing odd key is a hash key
    without encryption. The first codec is used for encoding, so list the
    newest pair first when rotating keys.
    """
    codecs: list[SecureCookie] = []
    for i in range(0, len(keys), 2):
        block_key = keys[i + 1] if i + 1 < len(keys) else None
        codecs.append(SecureCookie(keys[i], block_key))
    return codecs


def encode_multi(name: str, value: str, codecs: Sequence[CookieCodec]) -> str:
    """Encode *value* with the primary (first) codec."""
    if not codecs:
        raise CookieEncodeError("no codecs were provided")
    return codecs[0].encode(name, value)


def decode_multi(name: str, token: str, codecs: Sequence[CookieCodec]) -> str:
    """Decode *token* with the first codec that verifies it.

    Raises:
        CookieDecodeError: No codec accepted the token; ``errors`` lists the
            failure reported by each one.
    """
    if not codecs:
        raise CookieDecodeError("no codecs were provided")
    errors: list[Exception] = []
    for codec in codecs:
        try:
            return codec.decode(name, token)
        except CookieDecodeError as exc:
            errors.append(exc)
    if len(errors) == 1:
        raise CookieDecodeError(str(errors[0]), errors=errors)
    raise CookieDecodeError(f"cookie rejected by all {len(errors)} codecs", errors=errors)
