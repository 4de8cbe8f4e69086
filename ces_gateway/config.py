"""
Environment-driven configuration for the CES gateway.
"""
import os
from typing import Optional
from dataclasses import dataclass, field

from ces_gateway.signing import Credential

DEFAULT_IAM_API_BASE = 'https://iam.ru-moscow-1.hc.sbercloud.ru/v3'
DEFAULT_CES_API_BASE = 'https://ces.ru-moscow-1.hc.sbercloud.ru/V1.0'


@dataclass(frozen=True)
class GatewayConfig:
    """
    Process-wide settings, read once at start-up.

    Attributes:
        signer_key: Access key used to sign CES calls (SIGNER_KEY)
        signer_secret: Secret key used to sign CES calls (SIGNER_SECRET)
        iam_api_base: Identity service base URL (IAM_API_BASE)
        ces_api_base: Monitoring API base URL (CES_API_BASE)
        ces_stage: Value of the X-Stage header sent upstream (CES_STAGE)
        proxy_read_timeout: Read timeout for upstream calls in seconds (PROXY_READ_TIMEOUT)
        port: Listening port (PORT)
    """
    signer_key: str = ''
    signer_secret: str = field(default='', repr=False)
    iam_api_base: str = DEFAULT_IAM_API_BASE
    ces_api_base: str = DEFAULT_CES_API_BASE
    ces_stage: str = 'RELEASE'
    proxy_read_timeout: Optional[float] = 10.0
    port: int = 80

    @classmethod
    def from_env(cls) -> 'GatewayConfig':
        """
        Build configuration from environment variables.

        Returns:
            GatewayConfig instance
        """
        timeout = os.environ.get('PROXY_READ_TIMEOUT', '10')
        return cls(
            signer_key=os.environ.get('SIGNER_KEY', ''),
            signer_secret=os.environ.get('SIGNER_SECRET', ''),
            iam_api_base=os.environ.get('IAM_API_BASE', DEFAULT_IAM_API_BASE).rstrip('/'),
            ces_api_base=os.environ.get('CES_API_BASE', DEFAULT_CES_API_BASE).rstrip('/'),
            ces_stage=os.environ.get('CES_STAGE', 'RELEASE'),
            proxy_read_timeout=float(timeout) if timeout else None,
            port=int(os.environ.get('PORT', 80))
        )

    @property
    def credential(self) -> Credential:
        return Credential(access_key=self.signer_key, secret_key=self.signer_secret)
