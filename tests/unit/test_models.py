"""
Unit Tests for configuration and payload models
"""

import pytest

from visa_sdk.exceptions import ConfigurationError, RemoteError
from visa_sdk.models import (
    ENV_VARS,
    CardRequest,
    ClientConfig,
    EnrollUserRequest,
    RequestConfig,
    Result,
    UserDetails,
    UserRequest,
)


class TestClientConfig:
    """Test client configuration"""

    def test_defaults(self):
        config = ClientConfig()
        assert config.timeout == 30.0
        assert config.verify_hostname is False
        assert config.debug is False
        assert config.ca_cert is None

    def test_from_env(self, monkeypatch):
        """Test configuration from environment variables"""
        values = {
            "VISA_API_BASE_URL": "https://sandbox.api.visa.com",
            "VISA_API_CLIENT_CERT": "cert-pem",
            "VISA_API_PRIVATE_KEY": "key-pem",
            "VISA_API_PASSWORD": "secret",
            "VISA_API_COMMUNITY_CODE": "COMMUNITY",
            "VISA_API_USER_ID": "user",
        }
        for name, value in values.items():
            monkeypatch.setenv(name, value)
        monkeypatch.delenv("VISA_API_CA_CERT", raising=False)

        config = ClientConfig.from_env()

        assert config.base_url == "https://sandbox.api.visa.com"
        assert config.client_cert == "cert-pem"
        assert config.client_key == "key-pem"
        assert config.passphrase == "secret"
        assert config.community_code == "COMMUNITY"
        assert config.user_id == "user"
        assert config.ca_cert is None

    def test_from_env_overrides(self, monkeypatch):
        monkeypatch.setenv("VISA_API_USER_ID", "env-user")
        config = ClientConfig.from_env(user_id="explicit", timeout=5)

        assert config.user_id == "explicit"
        assert config.timeout == 5

    def test_env_var_names(self):
        assert set(ENV_VARS) >= {
            "base_url", "client_cert", "client_key", "community_code", "passphrase", "user_id",
        }

    def test_validate_required_names_first_missing(self, config_values):
        config_values["user_id"] = ""
        with pytest.raises(ConfigurationError, match="user_id is required"):
            ClientConfig(**config_values).validate_required()

    def test_validate_timeout(self, config_values):
        with pytest.raises(ConfigurationError, match="timeout must be positive"):
            ClientConfig(timeout=0, **config_values).validate_required()

    def test_frozen(self, test_config):
        with pytest.raises(Exception):
            test_config.user_id = "other"

    def test_repr_redacts_secrets(self, test_config):
        text = repr(test_config)

        assert test_config.passphrase not in text
        assert "BEGIN" not in text
        assert "***REDACTED***" in text
        assert str(test_config) == text


class TestRequestConfig:
    """Test immutable request configuration"""

    @pytest.fixture
    def defaults(self):
        return RequestConfig(
            base_url="https://sandbox.api.visa.com",
            headers={"Accept": "application/json"},
            auth=("user", "secret"),
            timeout=30,
        )

    def test_overlay_returns_new_instance(self, defaults):
        before = defaults.snapshot()
        request = defaults.overlay(method="POST", url="/vop/x", data={"a": {"b": 1}})

        assert request is not defaults
        assert request.method == "POST"
        assert request.auth == ("user", "secret")
        assert defaults.snapshot() == before

    def test_overlay_merges_headers(self, defaults):
        request = defaults.overlay(headers={"keyId": "kid", "Accept": "text/plain"})

        assert request.headers == {"Accept": "text/plain", "keyId": "kid"}
        assert defaults.headers == {"Accept": "application/json"}

    def test_overlay_deep_copies(self, defaults):
        data = {"card": {"cardNumber": "4111"}}
        request = defaults.overlay(data=data)

        data["card"]["cardNumber"] = "changed"
        request.headers["X-Mutated"] = "1"

        assert request.data == {"card": {"cardNumber": "4111"}}
        assert "X-Mutated" not in defaults.headers

    def test_overlay_unknown_field(self, defaults):
        with pytest.raises(ConfigurationError, match="Unknown request config field"):
            defaults.overlay(bogus=1)

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("", "https://sandbox.api.visa.com"),
            ("vdp/helloworld", "https://sandbox.api.visa.com/vdp/helloworld"),
            ("/vop/v1/users/enroll", "https://sandbox.api.visa.com/vop/v1/users/enroll"),
            ("https://other.test/x", "https://other.test/x"),
        ],
    )
    def test_full_url(self, defaults, url, expected):
        assert defaults.overlay(url=url).full_url == expected

    def test_view_excludes_auth(self, defaults):
        assert "auth" not in defaults.view()
        assert "auth" in defaults.snapshot()


class TestResult:
    def test_ok(self):
        result = Result(value={"a": 1})
        assert result.ok
        assert result.unwrap() == {"a": 1}

    def test_error(self):
        error = RemoteError(404, "Not Found", {"e": 1})
        result = Result(error=error)

        assert not result.ok
        with pytest.raises(RemoteError) as exc_info:
            result.unwrap()
        assert exc_info.value is error


class TestPayloads:
    """Test wire payloads"""

    def test_user_request(self):
        body = UserRequest(community_code="C", correlation_id="cid", user_key="u").to_body()

        assert body == {
            "communityCode": "C",
            "communityTermsVersion": "1",
            "correlationId": "cid",
            "userKey": "u",
        }

    def test_card_request(self):
        body = CardRequest(
            card={"cardId": "c1"}, community_code="C", correlation_id="cid", user_key="u"
        ).to_body()

        assert body["card"] == {"cardId": "c1"}
        assert body["userKey"] == "u"

    def test_populate_by_alias(self):
        request = UserRequest(communityCode="C", correlationId="cid", userKey="u")
        assert request.community_code == "C"

    def test_enroll_request(self):
        body = EnrollUserRequest(
            correlation_id="cid",
            user_details=UserDetails(
                cards=[{"cardNumber": "4111"}],
                community_code="C",
                external_user_id="u",
                user_key="u",
            ),
        ).to_body()

        assert body == {
            "correlationId": "cid",
            "communityTermsVersion": "1",
            "userDetails": {
                "cards": [{"cardNumber": "4111"}],
                "communityCode": "C",
                "externalUserId": "u",
                "userKey": "u",
            },
        }

    def test_missing_field(self):
        from pydantic import ValidationError

        with pytest.raises(ValidationError):
            UserRequest(community_code="C", correlation_id="cid")
