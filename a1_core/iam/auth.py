# a1_core/iam/auth.py

from __future__ import annotations

from typing import Optional

from django.conf import settings
from django.core.exceptions import ObjectDoesNotExist
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication

from a1_core.iam.policy import Principal

INACTIVE_USER_MSG = "User not found or inactive."


def principal_for(user) -> Optional[Principal]:
    """
    Principal for an authenticated user, or None when the user is anonymous,
    inactive, or has no active A1 profile.
    """
    if user is None or not getattr(user, "is_authenticated", False):
        return None
    if not getattr(user, "is_active", False):
        return None

    try:
        profile = user.a1_profile
    except ObjectDoesNotExist:
        return None

    if not profile.is_active:
        return None

    return Principal(
        user_id=user.pk,
        profile_id=profile.id,
        profile=profile.profile,
        establishment_id=profile.establishment_id,
    )


class ProfileJWTAuthentication(JWTAuthentication):
    """
    Authenticate using:
      1) Authorization: Bearer <access>
      2) HttpOnly cookie containing access token

    A valid token is not enough: the user must also have an active profile.
    """

    def authenticate(self, request):
        # 1) Prefer Authorization header
        header = self.get_header(request)
        if header:
            auth_result = super().authenticate(request)
            if auth_result is None:
                return None
            user, token = auth_result
        else:
            # 2) Cookie access token
            cookie_name = settings.SIMPLE_JWT.get("AUTH_COOKIE", "a1_access")
            raw_token = request.COOKIES.get(cookie_name)
            if not raw_token:
                return None

            token = self.get_validated_token(raw_token)
            user = self.get_user(token)

        if principal_for(user) is None:
            raise AuthenticationFailed(INACTIVE_USER_MSG, code="user_inactive")
        return user, token
