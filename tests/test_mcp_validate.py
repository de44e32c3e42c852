"""Tests for structural validation of upstream payloads and tool input."""
import pytest

from common.errors import SchemaValidationError
from mcp_schemas import (
    DOWNLOAD_STATS_INPUT,
    NAME_VERSION_INPUT,
    PACKAGE_DOCUMENT,
    QUALITY_SCORE,
    REGISTRY_RECORD,
    VERSION_MANIFEST,
)
from mcp_validate import validate_input, validate_output, validate_response


class TestValidateResponse:
    """Upstream shapes are structural: required fields and kinds only."""

    def test_unknown_fields_are_ignored(self):
        data = {
            "name": "pkg",
            "version": "1.0.0",
            "repository": {"type": "git", "url": "git+https://github.com/a/b.git"},
            "_id": "pkg@1.0.0",
            "gitHead": "abc",
        }
        assert validate_response(REGISTRY_RECORD, data, source="package") is data

    def test_missing_repository_url_fails(self):
        data = {"name": "pkg", "version": "1.0.0", "repository": {"type": "git"}}
        with pytest.raises(SchemaValidationError) as err:
            validate_response(REGISTRY_RECORD, data, source="package")
        assert err.value.path == "repository"
        assert "'url' is a required property" in str(err.value)

    def test_missing_repository_fails(self):
        with pytest.raises(SchemaValidationError):
            validate_response(REGISTRY_RECORD, {"name": "pkg", "version": "1.0.0"}, source="package")

    def test_optional_field_must_match_kind_when_present(self):
        data = {"name": "pkg", "version": "1.0.0", "description": 42}
        with pytest.raises(SchemaValidationError) as err:
            validate_response(VERSION_MANIFEST, data, source="package")
        assert err.value.path == "description"

    def test_dependency_mappings_check_value_kind_only(self):
        ok = {"name": "pkg", "version": "1.0.0", "dependencies": {"@scope/a": "^1.0.0", "b": "*"}}
        validate_response(VERSION_MANIFEST, ok, source="package")

        bad = {"name": "pkg", "version": "1.0.0", "dependencies": {"b": 1}}
        with pytest.raises(SchemaValidationError) as err:
            validate_response(VERSION_MANIFEST, bad, source="package")
        assert err.value.path == "dependencies/b"

    def test_document_requires_latest_dist_tag(self):
        doc = {"name": "pkg", "dist-tags": {"next": "2.0.0"}, "versions": {"2.0.0": {}}}
        with pytest.raises(SchemaValidationError):
            validate_response(PACKAGE_DOCUMENT, doc, source="package document")

    def test_quality_scores_outside_unit_range_fail(self):
        data = {"score": {"final": 1.5, "detail": {"quality": 0.1, "popularity": 0.2, "maintenance": 0.3}}}
        with pytest.raises(SchemaValidationError) as err:
            validate_response(QUALITY_SCORE, data, source="quality")
        assert err.value.path == "score/final"

    def test_non_object_payload_fails(self):
        with pytest.raises(SchemaValidationError) as err:
            validate_response(VERSION_MANIFEST, ["not", "an", "object"], source="package")
        assert "Invalid package data structure" in str(err.value)


class TestValidateInput:

    def test_none_values_count_as_omitted(self):
        validate_input(NAME_VERSION_INPUT, {"packageName": "react", "version": None})

    def test_missing_required_argument(self):
        with pytest.raises(SchemaValidationError) as err:
            validate_input(NAME_VERSION_INPUT, {})
        assert "'packageName' is a required property" in str(err.value)

    def test_unknown_period_is_rejected(self):
        with pytest.raises(SchemaValidationError) as err:
            validate_input(DOWNLOAD_STATS_INPUT, {"packageName": "react", "period": "last-year"})
        assert str(err.value).startswith("Invalid input at 'period'")

    def test_unexpected_argument_is_rejected(self):
        with pytest.raises(SchemaValidationError):
            validate_input(NAME_VERSION_INPUT, {"packageName": "react", "tag": "next"})


def test_validate_output_reports_path():
    schema = {"type": "object", "required": ["n"], "properties": {"n": {"type": "integer"}}}
    with pytest.raises(SchemaValidationError) as err:
        validate_output(schema, {"n": "x"})
    assert "Invalid output at 'n'" in str(err.value)
