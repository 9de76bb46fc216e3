"""Tests for route-table extraction."""

from pathlib import Path

import pytest

from apidoc_cli.config import ExtractionConfig
from apidoc_cli.errors import MissingFieldError, ShapeError
from apidoc_cli.routes import (
    canonical_token,
    extract_route_module,
    marshall_authentication,
    module_name,
    uncamel,
)


class TestAuthentication:
    """Tests for auth-strategy normalisation."""

    def test_oauth_and_device_session_token(self):
        """Test the canonical two-token example for a required route."""
        auth = marshall_authentication(["sessionTokenWithDevice", "oauthToken"], optional=False)
        assert list(auth.tokens) == ["sessionToken", "oauthToken"]
        assert auth.summary == (
            "authenticated with OAuth bearer token, or HAWK-authenticated with session token"
        )
        assert auth.emojis == ":lock:"
        assert auth.optional is False

    def test_optional_oauth_and_session_tokens(self):
        """Test dedup, OAuth-first ordering and the optional prefix."""
        auth = marshall_authentication(
            ["sessionTokenWithDevice", "sessionToken", "oauthToken"], optional=True,
        )
        assert auth.tokens == ("sessionToken", "oauthToken")
        assert auth.token == "sessionToken, oauthToken"
        assert auth.emojis == ":lock::question:"
        assert auth.summary == (
            "Optionally authenticated with OAuth bearer token, "
            "or HAWK-authenticated with session token"
        )

    def test_single_required_token(self):
        """Test a key-fetch token variant on its own."""
        auth = marshall_authentication(["keyFetchTokenWithVerificationStatus"], optional=False)
        assert auth.tokens == ("keyFetchToken",)
        assert auth.emojis == ":lock:"
        assert auth.summary == "HAWK-authenticated with key fetch token"

    def test_hawk_tokens_keep_their_order(self):
        """Test that non-OAuth tokens keep first-seen order."""
        auth = marshall_authentication(["sessionToken", "passwordChangeToken"], optional=False)
        assert auth.summary == (
            "HAWK-authenticated with session token, "
            "or HAWK-authenticated with password change token"
        )

    def test_unknown_tokens_pass_through(self):
        """Test that tokens outside both prefixes are kept as-is."""
        assert canonical_token("accountResetToken") == "accountResetToken"
        assert canonical_token("sessionTokenWithVerificationStatus") == "sessionToken"

    def test_token_patterns_are_configurable(self):
        """Test a custom session-token pattern."""
        config = ExtractionConfig(session_token_pattern=r"^session")
        assert canonical_token("sessionUnverified", config) == "sessionToken"
        assert canonical_token("sessionUnverified") == "sessionUnverified"

    def test_uncamel(self):
        """Test camelCase to spaced lower case."""
        assert uncamel("sessionToken") == "session token"
        assert uncamel("plain") == "plain"


class TestModuleName:
    """Tests for module_name()."""

    def test_capitalises_the_stem(self):
        """Test that only the first letter of the stem is upper-cased."""
        assert module_name("lib/routes/account.js") == "Account"
        assert module_name("recovery-email.js") == "Recovery-email"
        assert module_name("Sms.js") == "Sms"


class TestExtractRouteModule:
    """Tests for extract_route_module() on whole source files."""

    @pytest.fixture
    def account(self, js_parser, sample_service_path: Path):
        path = sample_service_path / "lib" / "routes" / "account.js"
        return extract_route_module(js_parser.parse_file(path), "lib/routes/account.js")

    def test_module_metadata(self, account):
        """Test module name, slug and route order."""
        assert account.name == "Account"
        assert account.slug == "account"
        assert [(r.method, r.path) for r in account.routes] == [
            ("POST", "/account/create"),
            ("GET", "/account/status"),
        ]

    def test_route_slug(self, account):
        """Test route anchors."""
        assert account.routes[0].slug == "post-accountcreate"
        assert account.routes[1].slug == "get-accountstatus"

    def test_query_parameters(self, account):
        """Test validate.query parameters."""
        create = account.routes[0]
        assert [(p.name, p.validation) for p in create.query_parameters] == [
            ("keys", "isA.boolean.optional"),
            ("service", "validators.service"),
            ("code", "isA.string.regex(validators.HEX_STRING)"),
        ]

    def test_request_body_uses_module_variables(self, account):
        """Test validate.payload parameters with module-level bindings."""
        create = account.routes[0]
        assert [(p.name, p.validation) for p in create.request_body] == [
            ("email", "validators.email.required"),
            ("authPW", "isA.string.min(64).max(64).regex(HEX_STRING).required"),
            ("metricsContext", "require(../metrics/context).schema"),
        ]

    def test_response_body(self, account):
        """Test response.schema parameters."""
        create = account.routes[0]
        assert [(p.name, p.validation) for p in create.response_body] == [
            ("uid", "isA.string.regex(HEX_STRING).required"),
        ]

    def test_route_without_auth(self, account):
        """Test that a route without config.auth has no authentication."""
        assert account.routes[0].authentication is None

    def test_route_with_optional_auth(self, account):
        """Test an optional multi-strategy route."""
        status = account.routes[1]
        assert status.authentication.optional is True
        assert status.authentication.summary.startswith("Optionally authenticated with OAuth")
        assert not status.has_query_parameters
        assert not status.has_request_body
        assert not status.has_response_body

    def test_directly_returned_array_and_schema_call(self, js_parser, sample_service_path: Path):
        """Test a returned array literal and a payload built by a call."""
        path = sample_service_path / "lib" / "routes" / "session.js"
        module = extract_route_module(js_parser.parse_file(path), "session.js")
        (destroy,) = module.routes
        assert destroy.authentication.summary == "HAWK-authenticated with session token"
        assert destroy.authentication.emojis == ":lock:"
        assert destroy.request_body == ()

    def test_arrow_with_expression_body(self, parse):
        """Test an arrow function returning the array directly."""
        program = parse("module.exports = () => [{ method: 'GET', path: '/' }]")
        module = extract_route_module(program, "root.js")
        assert module.routes[0].path == "/"


class TestIrregularSources:
    """Shapes that abort extraction."""

    def test_two_exports(self, parse):
        """Test that two exports are fatal."""
        program = parse("module.exports = () => []\nmodule.exports.x = 1")
        with pytest.raises(ShapeError, match="Expected 1 export, found 2"):
            extract_route_module(program, "bad.js")

    def test_no_export(self, parse):
        """Test that a module without exports is fatal."""
        with pytest.raises(ShapeError, match="found 0"):
            extract_route_module(parse("const routes = []"), "bad.js")

    def test_export_is_not_a_function(self, parse):
        """Test that a non-function export is fatal."""
        with pytest.raises(ShapeError, match=r'Expected type \[function\], found "array"'):
            extract_route_module(parse("module.exports = []"), "bad.js")

    def test_missing_path(self, parse):
        """Test that a route without path is fatal."""
        program = parse("module.exports = () => [{ method: 'GET' }]")
        with pytest.raises(MissingFieldError, match='Missing property "path"'):
            extract_route_module(program, "bad.js")

    def test_non_literal_method(self, parse):
        """Test that a computed method is fatal."""
        program = parse("module.exports = () => [{ method: METHOD, path: '/' }]")
        with pytest.raises(ShapeError, match="literal"):
            extract_route_module(program, "bad.js")

    def test_auth_without_strategy(self, parse):
        """Test that auth without strategy or strategies is fatal."""
        program = parse(
            "module.exports = () => [{ method: 'GET', path: '/', config: { auth: { mode: 'try' } } }]"
        )
        with pytest.raises(MissingFieldError, match="Missing authentication strategy"):
            extract_route_module(program, "bad.js")

    def test_two_return_statements(self, parse):
        """Test that two top-level returns are fatal."""
        program = parse("module.exports = function () { return []\n return [] }")
        with pytest.raises(ShapeError, match="Expected 1 return statement, found 2"):
            extract_route_module(program, "bad.js")

    def test_returned_variable_must_be_an_array(self, parse):
        """Test that the returned variable must hold an array literal."""
        program = parse("module.exports = function () { const routes = {}\n return routes }")
        with pytest.raises(ShapeError, match=r"Expected type \[array\]"):
            extract_route_module(program, "bad.js")

    def test_error_names_the_file_and_line(self, parse):
        """Test the diagnostic prefix."""
        program = parse("\n\nmodule.exports = () => [{ method: 'GET' }]")
        with pytest.raises(MissingFieldError) as excinfo:
            extract_route_module(program, "lib/routes/bad.js")
        assert str(excinfo.value).startswith('Error parsing "lib/routes/bad.js" at line 3:')
