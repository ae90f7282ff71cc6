"""
Request middleware that logs authentication state for API calls.
"""
import logging

logger = logging.getLogger(__name__)

LOGGED_PREFIXES = ('/api/v1/rooms', '/api/v1/projects', '/api/v1/tasks', '/api/v1/dashboard')


class RequestAuthLoggingMiddleware:
    """
    Log cookie presence and the resolved identity for room/project/task requests.
    Output is at debug level so production logs stay quiet by default.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if request.path.startswith(LOGGED_PREFIXES):
            user = request.user
            logger.debug(
                f"{request.method} {request.path}: "
                f"has_access_token={bool(request.COOKIES.get('access_token'))}, "
                f"has_refresh_token={bool(request.COOKIES.get('refresh_token'))}, "
                f"session_authenticated={user.is_authenticated}, "
                f"identity={getattr(user, 'email', None) or None}"
            )

        return self.get_response(request)
