"""Tests for routegen error types."""

from pathlib import Path

import pytest

from routegen.core.errors import (
    AlreadyRegisteredError,
    ConfigError,
    DuplicateRouteError,
    EmptyPathError,
    ErrorContext,
    MalformedAnchorError,
    RegistryExhaustionError,
    RoutegenError,
    TemplateRenderError,
    make_anchor_error,
)


class TestErrorFormatting:
    """Tests for error messages and context."""

    def test_message_without_context(self):
        error = RoutegenError("something broke")
        assert str(error) == "something broke"
        assert error.context is None

    def test_message_with_file(self):
        error = RoutegenError("bad anchor", ErrorContext(file=Path("app/router/register.py")))
        assert str(error) == "app/router/register.py: bad anchor"

    def test_message_with_line(self):
        context = ErrorContext(file=Path("app/router/register.py"), line=12)
        assert context.format() == "app/router/register.py:12"

    def test_make_anchor_error(self):
        error = make_anchor_error("missing", Path("register.py"))
        assert isinstance(error, MalformedAnchorError)
        assert str(error) == "register.py: missing"
        assert make_anchor_error("missing").context is None

    @pytest.mark.parametrize(
        "error_type",
        [
            EmptyPathError,
            DuplicateRouteError,
            AlreadyRegisteredError,
            MalformedAnchorError,
            RegistryExhaustionError,
            TemplateRenderError,
            ConfigError,
        ],
    )
    def test_hierarchy(self, error_type: type[RoutegenError]):
        assert issubclass(error_type, RoutegenError)
