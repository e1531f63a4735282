# track_core/iam/auth.py

from __future__ import annotations

from django.conf import settings
from rest_framework_simplejwt.authentication import JWTAuthentication


def _attach_scope(request, user) -> None:
    from track_core.iam.services import scope_for_user

    scope = scope_for_user(user)
    request.scope = scope
    request.tenant_id = scope.tenant_id if scope else None


class CookieOrHeaderJWTAuthentication(JWTAuthentication):
    """
    Authenticate using:
      1) Authorization: Bearer <access>
      2) HttpOnly cookie containing access token

    Attaches the employee scope (tenant + access level) once the user is known.
    """

    def authenticate(self, request):
        header = self.get_header(request)
        if header:
            auth_result = super().authenticate(request)
            if auth_result is None:
                return None
            user, token = auth_result
            _attach_scope(request, user)
            return user, token

        cookie_name = settings.SIMPLE_JWT.get("AUTH_COOKIE", "track_access")
        raw_token = request.COOKIES.get(cookie_name)
        if not raw_token:
            return None

        validated_token = self.get_validated_token(raw_token)
        user = self.get_user(validated_token)

        _attach_scope(request, user)
        return user, validated_token
