"""Tests for npub.core.errors module."""

from npub.core.errors import ErrorCode


class TestErrorCodeValues:
    def test_numeric_values(self) -> None:
        assert ErrorCode.OK == 0
        assert ErrorCode.USER_ERROR == 1
        assert ErrorCode.ENV_ERROR == 2
        assert ErrorCode.BUILD_ERROR == 3
        assert ErrorCode.NETWORK_ERROR == 4
        assert ErrorCode.IO_ERROR == 5

    def test_codes_are_distinct(self) -> None:
        assert len({int(c) for c in ErrorCode}) == len(list(ErrorCode))


class TestErrorCodeUsage:
    def test_can_use_as_int(self) -> None:
        code: int = ErrorCode.BUILD_ERROR
        assert code == 3

    def test_str(self) -> None:
        assert str(ErrorCode.USER_ERROR) == "user error"

    def test_is_success(self) -> None:
        assert ErrorCode.OK.is_success
        assert not ErrorCode.IO_ERROR.is_success
