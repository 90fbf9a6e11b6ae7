"""Browser login and trust-token harvesting for iCloud."""

from .authenticator import ICloudAuthenticator
from .browser_driver import PlaywrightBrowserDriver, DriverTimings
from .flow import AuthFlow, FlowState, run_auth_flow, run_manual_flow
from .models import AuthResult, Credentials

__all__ = [
    'ICloudAuthenticator',
    'PlaywrightBrowserDriver',
    'DriverTimings',
    'AuthFlow',
    'FlowState',
    'run_auth_flow',
    'run_manual_flow',
    'AuthResult',
    'Credentials'
]
