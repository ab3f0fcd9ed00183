from auth.types import OAuthUserInfo, Provider
from oauth.base import OAuthProvider, OAuthProviderError

NAVER_AUTH_URL = "https://nid.naver.com/oauth2.0/authorize"
NAVER_TOKEN_URL = "https://nid.naver.com/oauth2.0/token"
NAVER_PROFILE_URL = "https://openapi.naver.com/v1/nid/me"


class NaverOAuthProvider(OAuthProvider):
    provider = Provider.NAVER
    authorize_url = NAVER_AUTH_URL
    token_url = NAVER_TOKEN_URL

    @property
    def user_info_url(self) -> str:
        return NAVER_PROFILE_URL

    def _parse_user_info(self, payload: dict) -> OAuthUserInfo:
        if payload.get("resultcode") not in (None, "00"):
            raise OAuthProviderError(f"Naver profile error: {payload.get('message')}")

        profile = payload.get("response") or {}
        provider_id = profile.get("id")
        if not provider_id:
            raise OAuthProviderError("Naver profile has no id")

        email = profile.get("email")
        # Naver only hands out emails it has confirmed with the account owner.
        return OAuthUserInfo(
            provider_id=str(provider_id),
            email=email,
            email_verified=bool(email),
        )
