"""
Test suite for the callback-to-awaitable property oracle adapter.
"""

import asyncio
import threading

import pytest

from elementfinder.core.adapters import CallbackPropertyOracle, coerce_attributes
from elementfinder.core.types import NodeAttributes
from elementfinder.exceptions import OracleError, OracleUnavailableError

PAYLOADS = {
    7: {
        "dbId": 7,
        "name": "Beam-1",
        "externalId": "abc-7",
        "category": None,
        "properties": [
            {"displayName": "Mark", "displayValue": "B1", "displayCategory": "Identity"},
            {"displayName": "Length", "displayValue": 1200},
        ],
    }
}


def host_get_properties(db_id, on_success, on_error):
    if db_id in PAYLOADS:
        on_success(PAYLOADS[db_id])
    else:
        on_error({"code": 404, "msg": f"no node {db_id}"})


class TestCoerceAttributes:
    def test_camel_case_payload(self):
        attrs = coerce_attributes(7, PAYLOADS[7])
        assert attrs.name == "Beam-1"
        assert attrs.external_id == "abc-7"
        assert attrs.category == ""
        assert attrs.find_property("Length").value_text == "1200"

    def test_rejects_non_mapping(self):
        with pytest.raises(OracleError):
            coerce_attributes(7, ["not", "a", "mapping"])


class TestCallbackPropertyOracle:
    """Future bridging for callback host APIs."""

    @pytest.mark.asyncio
    async def test_synchronous_callback(self):
        oracle = CallbackPropertyOracle(host_get_properties)
        attrs = await oracle.get_properties(7)
        assert isinstance(attrs, NodeAttributes)
        assert attrs.dbid == 7

    @pytest.mark.asyncio
    async def test_callback_from_another_thread(self):
        def threaded(db_id, on_success, on_error):
            threading.Timer(0.01, on_success, args=(PAYLOADS[7],)).start()

        oracle = CallbackPropertyOracle(threaded)
        attrs = await asyncio.wait_for(oracle.get_properties(7), 2.0)
        assert attrs.name == "Beam-1"

    @pytest.mark.asyncio
    async def test_error_callback(self):
        oracle = CallbackPropertyOracle(host_get_properties)
        with pytest.raises(OracleError) as exc_info:
            await oracle.get_properties(99)
        assert exc_info.value.node_id == 99

    @pytest.mark.asyncio
    async def test_raising_host_function(self):
        def broken(db_id, on_success, on_error):
            raise RuntimeError("viewer torn down")

        oracle = CallbackPropertyOracle(broken)
        with pytest.raises(OracleError):
            await oracle.get_properties(7)

    @pytest.mark.asyncio
    async def test_unavailable_probe(self):
        oracle = CallbackPropertyOracle(host_get_properties, is_available=lambda: False)
        with pytest.raises(OracleUnavailableError):
            await oracle.get_properties(7)

    @pytest.mark.asyncio
    async def test_native_search(self):
        calls = []

        def host_search(text, on_success, on_error, fields):
            calls.append((text, fields))
            on_success([7, "8"])

        oracle = CallbackPropertyOracle(host_get_properties, search=host_search)

        assert await oracle.native_search("beam", ["Name"]) == [7, 8]
        assert calls == [("beam", ["Name"])]

    @pytest.mark.asyncio
    async def test_native_search_missing(self):
        oracle = CallbackPropertyOracle(host_get_properties)
        assert await oracle.native_search("beam") == []
