from drf_spectacular.extensions import OpenApiAuthenticationExtension


class ProfileJWTAuthenticationScheme(OpenApiAuthenticationExtension):
    target_class = "a1_core.iam.auth.ProfileJWTAuthentication"
    name = "BearerOrCookieJWT"

    def get_security_definition(self, auto_schema):
        # Documented as Bearer so the docs "Authorize" button works; the cookie is accepted too.
        return {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": (
                "Access token via `Authorization: Bearer <token>` "
                "or the HttpOnly cookie (a1_access). The user needs an active profile."
            ),
        }
