from __future__ import annotations

import pytest

from ajaxlite.transport import Transport, TransportFactory


class DummyTransport(Transport):
    name = "dummy"

    def __init__(self, status=200, body="", status_text="OK", error=None):
        super().__init__()
        self.status = status
        self.body = body
        self.status_text = status_text
        self.error = error
        self.payloads = []

    async def exchange(self, request, payload):
        self.payloads.append(payload)
        if self.error is not None:
            raise self.error
        return self.status, self.status_text, self.body


@pytest.fixture
def make_factory():
    """Build a factory whose native transport replays a canned response."""

    def build(status=200, body="", status_text="OK", error=None):
        created = []

        def builder():
            handle = DummyTransport(status, body, status_text, error)
            created.append(handle)
            return handle

        factory = TransportFactory(native=builder, supports_native=True)
        factory.created = created
        return factory

    return build


@pytest.fixture
def unavailable_factory():
    return TransportFactory(native=None, legacy=(), supports_native=False)
