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
"""Starlette implementations of the CORS exchange ports."""

from __future__ import annotations

from starlette.datastructures import MutableHeaders
from starlette.requests import Request
from starlette.responses import Response

from flycors.cors.vary import VARY, append_vary


class StarletteRequestReader:
    """Exposes a Starlette :class:`Request` as a ``RequestReader``."""

    def __init__(self, request: Request) -> None:
        self._request = request

    @property
    def method(self) -> str:
        return self._request.method

    def header(self, name: str) -> str | None:
        return self._request.headers.get(name)


class BufferedResponseWriter:
    """Records response mutations made before the downstream response exists.

    A filter only gets hold of the real response after ``call_next`` returns,
    so writes are buffered here and either turned into a terminating
    response (:meth:`to_response`) or copied onto the downstream one
    (:meth:`apply_to`).
    """

    def __init__(self) -> None:
        self._headers = MutableHeaders()
        self.status_code = 200
        self.ended = False

    def get_header(self, name: str) -> str | None:
        return self._headers.get(name)

    def set_header(self, name: str, value: str) -> None:
        self._headers[name] = value

    def set_status(self, status_code: int) -> None:
        self.status_code = status_code

    def end(self) -> None:
        self.ended = True

    def apply_to(self, response: Response) -> Response:
        """Copy buffered headers onto *response*, accumulating ``Vary``."""
        for name, value in self._headers.items():
            if name.lower() == VARY.lower():
                response.headers[VARY] = append_vary(response.headers.get(VARY), value)
            else:
                response.headers[name] = value
        return response

    def to_response(self) -> Response:
        """Build the bodiless response for a request answered by the filter."""
        return self.apply_to(Response(status_code=self.status_code))
