"""
JWT authentication that reads the access token from an HttpOnly cookie.
Falls back to the Authorization header so API tools and tests keep working.
"""

from django.conf import settings
from django.http import HttpRequest
from rest_framework_simplejwt.authentication import JWTAuthentication
from typing import Tuple, Optional


ACCESS_COOKIE = 'access_token'
REFRESH_COOKIE = 'refresh_token'


class CookieJWTAuthentication(JWTAuthentication):
    """
    Authenticate a session identity from the `access_token` cookie.

    The identity every room, project and task rule keys on is the
    authenticated user's email address; this class only establishes who
    the user is.
    """

    def authenticate(self, request: HttpRequest) -> Optional[Tuple]:
        """
        Args:
            request: The HTTP request

        Returns:
            A tuple of (user, validated_token) if authentication succeeds,
            None if no credentials are provided.
            Raises AuthenticationFailed if the cookie token is invalid.
        """
        access_token = request.COOKIES.get(ACCESS_COOKIE)

        if access_token is None:
            return super().authenticate(request)

        validated_token = self.get_validated_token(access_token)
        return self.get_user(validated_token), validated_token

    def authenticate_header(self, request: HttpRequest) -> str:
        return 'Bearer'


def cookie_kwargs():
    """Shared cookie attributes for setting and clearing the auth cookies."""
    return {
        'secure': settings.AUTH_COOKIE_SECURE,
        'httponly': True,
        'samesite': settings.AUTH_COOKIE_SAMESITE,
        'path': '/',
        'domain': settings.AUTH_COOKIE_DOMAIN,
    }
