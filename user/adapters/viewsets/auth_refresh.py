from rest_framework.views import APIView
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework import status
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.exceptions import TokenError
from django.conf import settings

from taskhive.jwt_auth import ACCESS_COOKIE, REFRESH_COOKIE, cookie_kwargs


class CookieTokenRefreshView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        refresh_cookie = request.COOKIES.get(REFRESH_COOKIE) or request.data.get('refresh')
        if not refresh_cookie:
            return Response({"error": "Refresh token cookie missing"}, status=status.HTTP_401_UNAUTHORIZED)

        try:
            refresh = RefreshToken(refresh_cookie)
            new_access = str(refresh.access_token)
        except TokenError:
            return Response({"error": "Invalid refresh token"}, status=status.HTTP_401_UNAUTHORIZED)

        res = Response({"detail": "Token refreshed"}, status=status.HTTP_200_OK)
        res.set_cookie(
            key=ACCESS_COOKIE,
            value=new_access,
            max_age=int(settings.SIMPLE_JWT['ACCESS_TOKEN_LIFETIME'].total_seconds()),
            **cookie_kwargs(),
        )
        return res
