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
"""Random session identifiers and key material."""

from __future__ import annotations

import base64
import secrets

SESSION_ID_BYTES = 32
"""Bytes of entropy in every session identifier."""


def generate_random_key(length: int = 32) -> bytes:
    """Return *length* cryptographically-secure random bytes."""
    return secrets.token_bytes(length)


def new_session_id() -> str:
    """Generate a session identifier.

    Returns:
        32 random bytes, base32-encoded without ``=`` padding (52 characters).
    """
    return base64.b32encode(generate_random_key(SESSION_ID_BYTES)).decode("ascii").rstrip("=")
