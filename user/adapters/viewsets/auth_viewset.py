import logging

from django.conf import settings
from django.contrib.auth import authenticate
from django.contrib.auth.models import User
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken

from taskhive.jwt_auth import ACCESS_COOKIE, REFRESH_COOKIE, cookie_kwargs
from ..serializers.user_serializers import UserSerializer, LoginSerializer, RegisterSerializer
from ...models import UserProfile

logger = logging.getLogger(__name__)


def _set_auth_cookies(response, user):
    refresh = RefreshToken.for_user(user)
    lifetimes = settings.SIMPLE_JWT

    # Tokens travel only as HttpOnly cookies, never in the body.
    response.set_cookie(
        key=ACCESS_COOKIE,
        value=str(refresh.access_token),
        max_age=int(lifetimes['ACCESS_TOKEN_LIFETIME'].total_seconds()),
        **cookie_kwargs(),
    )
    response.set_cookie(
        key=REFRESH_COOKIE,
        value=str(refresh),
        max_age=int(lifetimes['REFRESH_TOKEN_LIFETIME'].total_seconds()),
        **cookie_kwargs(),
    )
    return response


class AuthViewSet(viewsets.ViewSet):
    permission_classes = [AllowAny]
    authentication_classes = []
    serializer_class = LoginSerializer

    @extend_schema(request=LoginSerializer, responses={200: UserSerializer})
    @action(detail=False, methods=["post"])
    def login_with_email(self, request):
        email = (request.data.get("email") or "").strip().lower()
        password = request.data.get("password")

        if not email or not password:
            return Response(
                {"error": "Email and password are required"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        find_user = User.objects.filter(email__iexact=email).first()
        if not find_user:
            return Response(
                {"error": "Invalid email or password"},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        user = authenticate(request, username=find_user.username, password=password)
        if not user:
            logger.info(f"Failed login for {email}")
            return Response(
                {"error": "Invalid email or password"},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        response = Response({"user": UserSerializer(user).data}, status=status.HTTP_200_OK)
        return _set_auth_cookies(response, user)

    @extend_schema(request=RegisterSerializer, responses={201: UserSerializer})
    @action(detail=False, methods=["post"])
    def register(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        candidate = User(username=data['email'], email=data['email'],
                         first_name=data['first_name'], last_name=data['last_name'])
        try:
            validate_password(data['password'], user=candidate)
        except DjangoValidationError as e:
            return Response({"error": " ".join(e.messages)}, status=status.HTTP_400_BAD_REQUEST)

        with transaction.atomic():
            candidate.set_password(data['password'])
            candidate.save()
            UserProfile.objects.create(user=candidate, role=data['role'])

        logger.info(f"Registered user {candidate.email}")
        response = Response({"user": UserSerializer(candidate).data}, status=status.HTTP_201_CREATED)
        return _set_auth_cookies(response, candidate)

    @action(detail=False, methods=["post"])
    def logout(self, request):
        """
        Clear the HttpOnly auth cookies. Tokens are not blacklisted.
        """
        response = Response(
            {"message": "Successfully logged out"},
            status=status.HTTP_200_OK
        )
        kwargs = cookie_kwargs()
        for name in (ACCESS_COOKIE, REFRESH_COOKIE):
            response.delete_cookie(name, path=kwargs['path'], domain=kwargs['domain'],
                                   samesite=kwargs['samesite'])
        return response


class MeViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Current session identity",
        description="Returns the authenticated user's email identity and display-only global role.",
        responses={200: UserSerializer},
    )
    def retrieve(self, request):
        return Response(UserSerializer(request.user).data)
