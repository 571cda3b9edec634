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
"""Session store configuration properties."""

from __future__ import annotations

from dataclasses import dataclass, field

from redistore.core.config import config_properties


@config_properties(prefix="redistore.session")
@dataclass
class SessionProperties:
    """Configuration for the session store (redistore.session.*).

    ``key_pairs`` lists hash and block keys as consecutive strings; the first
    pair signs new cookies and every pair is accepted when decoding.
    ``max_age`` of ``None`` leaves cookies without a Max-Age attribute and
    stores entries for ``default_max_age`` seconds.
    """

    redis_url: str = "redis://localhost:6379/0"
    key_pairs: list = field(default_factory=list)
    key_prefix: str = "gosession_"
    max_length: int = 4096
    default_max_age: int = 60 * 20
    serializer: str = "pickle"
    timeout: float | None = None
    ping_timeout: float = 5.0
    path: str = "/"
    domain: str | None = None
    max_age: int | None = 86400 * 30
    secure: bool = False
    http_only: bool = True
    same_site: str | None = "lax"
