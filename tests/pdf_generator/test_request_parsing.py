"""
Unit tests for request body parsing and the request models.
"""

import base64
import json

import pytest
from pydantic import ValidationError

from pdf_generator.models import PaperFormat, RenderRequest, WaitUntil
from pdf_generator.request_parsing import RequestParseError, parse_request_body


class TestParseRequestBody:

    def test_full_request(self):
        body = json.dumps({
            "url": "https://example.com",
            "data": {"name": "Ada"},
            "options": {
                "waitUntil": "networkidle2",
                "timeout": 10000,
                "waitTime": 250,
                "failOnErrors": True,
                "includeConsoleLogs": True,
                "pdfFormat": "A3",
                "printBackground": False,
                "landscape": True,
                "margin": {"top": "10mm", "left": "5mm"},
            },
            "s3": {"bucket": "b", "key": "out", "fileName": "f.pdf"},
            "security": {"password": "p", "ownerPassword": "o"},
        })

        request = parse_request_body(body)

        assert request.page_url == "https://example.com"
        assert request.input_props == {"name": "Ada"}
        options = request.pdf_options
        assert options.wait_until is WaitUntil.NETWORK_IDLE_ALMOST_QUIET
        assert options.navigation_timeout_ms == 10000
        assert options.extra_wait_ms == 250
        assert options.fail_on_page_errors is True
        assert options.include_console_logs is True
        assert options.paper_format is PaperFormat.A3
        assert options.print_background is False
        assert options.landscape is True
        assert options.margins.top == "10mm"
        assert request.storage_target.path_prefix == "out"
        assert request.storage_target.file_name == "f.pdf"
        assert request.security.owner_password == "o"

    def test_defaults(self):
        request = parse_request_body(b'{"url": "https://example.com"}')
        options = request.pdf_options

        assert request.input_props == {}
        assert options.wait_until is WaitUntil.NETWORK_IDLE_QUIET
        assert options.navigation_timeout_ms == 30000
        assert options.extra_wait_ms == 0
        assert options.paper_format is PaperFormat.A4
        assert options.print_background is True
        assert options.landscape is False
        assert options.margins is None
        assert request.storage_target.bucket is None
        assert request.storage_target.path_prefix == "pdfs"
        assert request.security.requested is False

    def test_base64_body(self):
        encoded = base64.b64encode(b'{"url": "https://example.com"}')
        request = parse_request_body(encoded, is_base64_encoded=True)
        assert request.page_url == "https://example.com"

    def test_invalid_json(self):
        with pytest.raises(RequestParseError) as exc_info:
            parse_request_body("{not json")
        assert exc_info.value.message == "Invalid JSON in request body"
        assert exc_info.value.error

    def test_invalid_base64(self):
        with pytest.raises(RequestParseError):
            parse_request_body("%%%not-base64%%%", is_base64_encoded=True)

    def test_non_object_json(self):
        with pytest.raises(RequestParseError, match="Expected a JSON object"):
            parse_request_body("[1, 2, 3]")

    def test_empty_body_missing_url(self):
        with pytest.raises(RequestParseError) as exc_info:
            parse_request_body("")
        assert exc_info.value.message == "Invalid request body"
        assert "url" in exc_info.value.error

    @pytest.mark.parametrize("options", [
        {"timeout": 0},
        {"waitTime": -1},
        {"waitUntil": "whenever"},
        {"pdfFormat": "B5"},
    ])
    def test_schema_violations(self, options):
        body = json.dumps({"url": "https://example.com", "options": options})
        with pytest.raises(RequestParseError) as exc_info:
            parse_request_body(body)
        assert exc_info.value.message == "Invalid request body"

    @pytest.mark.parametrize("prefix", ["/", "///", ""])
    def test_slash_only_or_empty_prefix_rejected(self, prefix):
        body = json.dumps({"url": "https://example.com", "s3": {"key": prefix}})
        with pytest.raises(RequestParseError) as exc_info:
            parse_request_body(body)
        assert exc_info.value.message == "Invalid request body"
        assert "s3.key" in exc_info.value.error

    def test_prefix_surrounding_slashes_stripped(self):
        request = parse_request_body('{"url": "https://example.com", "s3": {"key": "/reports/2026/"}}')
        assert request.storage_target.path_prefix == "reports/2026"

    def test_invalid_scheme_is_left_to_pipeline(self):
        """URL scheme checks happen in the pipeline, not while parsing."""
        request = parse_request_body('{"url": "javascript:alert(1)"}')
        assert request.page_url == "javascript:alert(1)"


class TestRenderRequestModel:

    def test_populate_by_field_name(self):
        request = RenderRequest(page_url="https://example.com", input_props={"a": 1})
        assert request.input_props == {"a": 1}

    def test_immutable(self):
        request = RenderRequest(page_url="https://example.com")
        with pytest.raises(ValidationError):
            request.page_url = "https://other.example.com"

    def test_redacted_echo(self):
        request = RenderRequest.model_validate({
            "url": "https://example.com",
            "security": {"password": "secret"},
        })

        echo = request.redacted_echo()

        assert echo["security"] == {"password": "***", "ownerPassword": None}
        assert echo["url"] == "https://example.com"
        assert echo["options"]["waitUntil"] == "networkidle0"
        assert echo["s3"]["key"] == "pdfs"
