"""Bearer-token authentication for the portal API."""

from .jwt import create_access_token, verify_token, get_current_principal

__all__ = ['create_access_token', 'verify_token', 'get_current_principal']
