"""
Unit tests for environment-driven configuration.
"""
import pytest

from ces_gateway.config import DEFAULT_CES_API_BASE, DEFAULT_IAM_API_BASE, GatewayConfig

ENV_VARS = (
    'SIGNER_KEY', 'SIGNER_SECRET', 'IAM_API_BASE', 'CES_API_BASE',
    'CES_STAGE', 'PROXY_READ_TIMEOUT', 'PORT'
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestGatewayConfig:

    def test_defaults(self, clean_env):
        config = GatewayConfig.from_env()

        assert config.signer_key == ''
        assert config.iam_api_base == DEFAULT_IAM_API_BASE
        assert config.ces_api_base == DEFAULT_CES_API_BASE
        assert config.ces_stage == 'RELEASE'
        assert config.proxy_read_timeout == 10.0
        assert config.port == 80
        assert not config.credential.is_complete()

    def test_from_env(self, clean_env):
        clean_env.setenv('SIGNER_KEY', 'AKID')
        clean_env.setenv('SIGNER_SECRET', 'SECRET')
        clean_env.setenv('IAM_API_BASE', 'https://iam.example.com/v3/')
        clean_env.setenv('CES_API_BASE', 'https://ces.example.com/V1.0/')
        clean_env.setenv('CES_STAGE', 'TEST')
        clean_env.setenv('PROXY_READ_TIMEOUT', '2.5')
        clean_env.setenv('PORT', '8080')

        config = GatewayConfig.from_env()

        assert config.iam_api_base == 'https://iam.example.com/v3'
        assert config.ces_api_base == 'https://ces.example.com/V1.0'
        assert config.ces_stage == 'TEST'
        assert config.proxy_read_timeout == 2.5
        assert config.port == 8080
        assert config.credential.access_key == 'AKID'
        assert config.credential.is_complete()

    def test_empty_timeout_disables_it(self, clean_env):
        clean_env.setenv('PROXY_READ_TIMEOUT', '')

        assert GatewayConfig.from_env().proxy_read_timeout is None

    def test_secret_not_in_repr(self, clean_env):
        clean_env.setenv('SIGNER_KEY', 'AKID')
        clean_env.setenv('SIGNER_SECRET', 'very-secret')

        assert 'very-secret' not in repr(GatewayConfig.from_env().credential)
