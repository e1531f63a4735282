# track_core/iam/api/auth.py

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from django.conf import settings
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer

from track_core.iam.api.serializers import DetailResponseSerializer, LoginRequestSerializer

logger = logging.getLogger(__name__)


def _seconds(value: Any) -> int:
    """
    JWT lifetime setting (timedelta or seconds) as whole seconds.
    """
    if isinstance(value, timedelta):
        return int(value.total_seconds())
    return int(value)


def _cookie_names() -> tuple[str, str]:
    jwt_cfg = getattr(settings, "SIMPLE_JWT", {}) or {}
    return (
        jwt_cfg.get("AUTH_COOKIE", "track_access"),
        jwt_cfg.get("AUTH_COOKIE_REFRESH", "track_refresh"),
    )


def _set_auth_cookies(response: Response, *, access: str, refresh: str) -> None:
    jwt_cfg = getattr(settings, "SIMPLE_JWT", {}) or {}
    access_name, refresh_name = _cookie_names()

    secure = bool(jwt_cfg.get("AUTH_COOKIE_SECURE", False))
    samesite = jwt_cfg.get("AUTH_COOKIE_SAMESITE", "Lax")

    for name, value, lifetime in (
        (access_name, access, jwt_cfg.get("ACCESS_TOKEN_LIFETIME", timedelta(minutes=30))),
        (refresh_name, refresh, jwt_cfg.get("REFRESH_TOKEN_LIFETIME", timedelta(days=14))),
    ):
        response.set_cookie(
            name,
            value,
            max_age=_seconds(lifetime),
            httponly=True,
            secure=secure,
            samesite=samesite,
            path="/",
        )


def _clear_auth_cookies(response: Response) -> None:
    for name in _cookie_names():
        response.delete_cookie(name, path="/")


class LoginView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(request=LoginRequestSerializer, responses={200: DetailResponseSerializer}, tags=["IAM"])
    def post(self, request):
        ser = LoginRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        token_ser = TokenObtainPairSerializer(
            data={"username": ser.validated_data["login"], "password": ser.validated_data["password"]}
        )
        token_ser.is_valid(raise_exception=True)

        res = Response(
            {"detail": "login ok", "access": token_ser.validated_data["access"]},
            status=status.HTTP_200_OK,
        )
        _set_auth_cookies(res, access=token_ser.validated_data["access"], refresh=token_ser.validated_data["refresh"])
        logger.info("login ok login=%s", ser.validated_data["login"])
        return res


class RefreshView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(request=None, responses={200: DetailResponseSerializer}, tags=["IAM"])
    def post(self, request):
        _, refresh_name = _cookie_names()
        refresh = request.COOKIES.get(refresh_name)

        ser = TokenRefreshSerializer(data={"refresh": refresh})
        ser.is_valid(raise_exception=True)

        access = ser.validated_data["access"]
        new_refresh = ser.validated_data.get("refresh", refresh)

        res = Response({"detail": "refreshed"}, status=status.HTTP_200_OK)
        _set_auth_cookies(res, access=access, refresh=new_refresh)
        return res


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=None, responses={200: DetailResponseSerializer}, tags=["IAM"])
    def post(self, request):
        res = Response({"detail": "logged out"}, status=status.HTTP_200_OK)
        _clear_auth_cookies(res)
        return res
