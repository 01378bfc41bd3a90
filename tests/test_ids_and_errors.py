"""
Tests for identifier generation and structured errors
"""

import pytest

from talawa.errors import (
    DEFAULT_MESSAGES,
    ErrorCode,
    Issue,
    TalawaGraphQLError,
    report_unexpected_errors,
    resource_not_found,
    unauthenticated,
)
from talawa.ids import generate_ulid, uuid7


class TestUuid7:
    def test_version_and_variant(self):
        value = uuid7()

        assert value.version == 7
        assert value.variant == "specified in RFC 4122"

    def test_monotonic(self):
        values = [uuid7() for _ in range(1000)]

        assert values == sorted(values)
        assert len(set(values)) == len(values)


class TestUlid:
    def test_canonical_form(self):
        value = generate_ulid()

        assert len(value) == 26
        assert set(value) <= set("0123456789ABCDEFGHJKMNPQRSTVWXYZ")

    def test_timestamp_prefix_sorts(self):
        assert generate_ulid(timestamp_ms=1) < generate_ulid(timestamp_ms=2)
        assert generate_ulid(timestamp_ms=0).startswith("0000000000")

    def test_timestamp_out_of_range(self):
        with pytest.raises(ValueError):
            generate_ulid(timestamp_ms=1 << 48)


class TestTalawaGraphQLError:
    def test_default_message_and_code(self):
        error = TalawaGraphQLError(ErrorCode.FORBIDDEN_ACTION)

        assert error.message == DEFAULT_MESSAGES[ErrorCode.FORBIDDEN_ACTION]
        assert error.extensions == {"code": "forbidden_action"}

    def test_issues_extension(self):
        error = TalawaGraphQLError(
            ErrorCode.INVALID_ARGUMENTS,
            issues=[Issue(("input", "images", 1), "Too big"), Issue(("input", "caption"))],
        )

        assert error.extensions["issues"] == [
            {"argumentPath": ["input", "images", 1], "message": "Too big"},
            {"argumentPath": ["input", "caption"]},
        ]
        assert error.argument_paths == [["input", "images", 1], ["input", "caption"]]

    def test_resource_not_found(self):
        error = resource_not_found("input", "organizationId")

        assert error.code is ErrorCode.ARGUMENTS_ASSOCIATED_RESOURCES_NOT_FOUND
        assert error.argument_paths == [["input", "organizationId"]]


class TestReportUnexpectedErrors:
    @pytest.mark.asyncio
    async def test_returns_result(self):
        @report_unexpected_errors
        async def resolver(value):
            return value * 2

        assert await resolver(21) == 42

    @pytest.mark.asyncio
    async def test_structured_error_passes_through(self):
        @report_unexpected_errors
        async def resolver():
            raise unauthenticated()

        with pytest.raises(TalawaGraphQLError) as exc_info:
            await resolver()

        assert exc_info.value.code is ErrorCode.UNAUTHENTICATED

    @pytest.mark.asyncio
    async def test_other_errors_become_unexpected(self):
        @report_unexpected_errors
        async def resolver():
            raise ConnectionError("db down")

        with pytest.raises(TalawaGraphQLError) as exc_info:
            await resolver()

        assert exc_info.value.extensions == {"code": "unexpected"}
        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert resolver.__name__ == "resolver"
