"""Tests for envelope decoding and status classification."""

from typing import Any, Dict, List, Optional

import httpx
import pytest

from proxmox_mobile.client.envelope import (
    accepts_none,
    classify_status,
    decode_envelope,
    error_for_status,
    extract_server_message,
    is_collection_type,
)
from proxmox_mobile.client.exceptions import (
    ErrorKind,
    ForbiddenError,
    InvalidCredentialsError,
    MalformedResponseError,
    NotFoundError,
    ServerError,
    UnexpectedStatusError,
)
from proxmox_mobile.client.models import Node, VersionInfo, VirtualMachine


def _response(status_code: int = 200, **kwargs) -> httpx.Response:
    return httpx.Response(status_code, **kwargs)


class TestDecodeEnvelope:
    """Tests for decoding {"data": ...}."""

    def test_decodes_typed_list(self):
        response = _response(json={"data": [{"node": "pve", "status": "online"}]})

        nodes = decode_envelope(response, List[Node], "nodes")

        assert nodes == [Node(node="pve", status="online")]

    def test_null_data_is_empty_list_for_collections(self):
        response = _response(json={"data": None})

        assert decode_envelope(response, List[VirtualMachine], "nodes/pve/qemu") == []

    def test_missing_data_is_empty_list_for_collections(self):
        assert decode_envelope(_response(json={}), List[Node], "nodes") == []

    def test_null_data_is_none_for_optional(self):
        response = _response(json={"data": None})

        assert decode_envelope(response, Optional[str], "nodes/pve/qemu/100/status/stop") is None
        assert decode_envelope(response, Any, "access/users") is None

    def test_null_data_is_malformed_for_required_object(self):
        response = _response(json={"data": None})

        with pytest.raises(MalformedResponseError) as exc_info:
            decode_envelope(response, VersionInfo, "version")

        assert exc_info.value.field_path == "data"
        assert exc_info.value.kind is ErrorKind.MALFORMED_RESPONSE

    def test_wrong_shape_reports_field_path(self):
        response = _response(json={"data": [{"vmid": 100, "status": "running"}, {"vmid": "abc", "status": "stopped"}]})

        with pytest.raises(MalformedResponseError) as exc_info:
            decode_envelope(response, List[VirtualMachine], "nodes/pve/qemu")

        assert exc_info.value.field_path == "data.1.vmid"
        assert exc_info.value.endpoint == "nodes/pve/qemu"

    def test_missing_required_field_reports_field_path(self):
        response = _response(json={"data": {"release": "8.3"}})

        with pytest.raises(MalformedResponseError) as exc_info:
            decode_envelope(response, VersionInfo, "version")

        assert exc_info.value.field_path == "data.version"

    def test_non_json_body(self):
        response = _response(content=b"<html>proxy error</html>")

        with pytest.raises(MalformedResponseError, match="not valid JSON"):
            decode_envelope(response, List[Node], "nodes")

    def test_body_not_an_object(self):
        with pytest.raises(MalformedResponseError, match="not a JSON object"):
            decode_envelope(_response(json=[1, 2, 3]), List[Node], "nodes")

    def test_unknown_fields_are_kept(self):
        response = _response(json={"data": {"version": "8.3.0", "console": "xtermjs"}})

        info = decode_envelope(response, VersionInfo, "version")

        assert info.version == "8.3.0"
        assert info.model_extra == {"console": "xtermjs"}


class TestTypeHelpers:
    """Tests for payload type introspection."""

    @pytest.mark.parametrize("payload_type", [List[Node], list, List[Dict[str, Any]]])
    def test_collection_types(self, payload_type):
        assert is_collection_type(payload_type) is True

    @pytest.mark.parametrize("payload_type", [Node, Dict[str, Any], Optional[str], str])
    def test_non_collection_types(self, payload_type):
        assert is_collection_type(payload_type) is False

    def test_accepts_none(self):
        assert accepts_none(Optional[str]) is True
        assert accepts_none(Any) is True
        assert accepts_none(str | None) is True
        assert accepts_none(VersionInfo) is False


class TestStatusClassification:
    """Tests for mapping HTTP status codes to errors."""

    @pytest.mark.parametrize(
        "status_code,error_class,kind",
        [
            (401, InvalidCredentialsError, ErrorKind.INVALID_CREDENTIALS),
            (403, ForbiddenError, ErrorKind.FORBIDDEN),
            (404, NotFoundError, ErrorKind.NOT_FOUND),
            (500, ServerError, ErrorKind.SERVER_ERROR),
            (400, UnexpectedStatusError, ErrorKind.UNEXPECTED_STATUS),
            (502, UnexpectedStatusError, ErrorKind.UNEXPECTED_STATUS),
            (596, UnexpectedStatusError, ErrorKind.UNEXPECTED_STATUS),
        ],
    )
    def test_status_mapping(self, status_code, error_class, kind):
        error = error_for_status(status_code, "nodes")

        assert type(error) is error_class
        assert error.kind is kind
        assert error.status_code == status_code
        assert error.endpoint == "nodes"

    def test_success_does_not_raise(self):
        classify_status(_response(204), "access/users/alice@pve")

    def test_classify_raises_with_server_message(self):
        response = _response(
            400,
            json={"data": None, "errors": {"vmid": "invalid format - value must be positive"}},
        )

        with pytest.raises(UnexpectedStatusError) as exc_info:
            classify_status(response, "nodes/pve/qemu")

        assert exc_info.value.server_message == "vmid: invalid format - value must be positive"
        assert "vmid: invalid format" in str(exc_info.value)

    def test_server_message_from_reason_phrase(self):
        response = httpx.Response(
            401,
            content=b"",
            extensions={"reason_phrase": b"authentication failure"},
        )

        assert extract_server_message(response) == "authentication failure"

    def test_server_message_from_message_field(self):
        response = _response(500, json={"message": "got timeout\n"})

        assert extract_server_message(response) == "got timeout"
