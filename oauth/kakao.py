from auth.types import OAuthUserInfo, Provider
from oauth.base import OAuthProvider, OAuthProviderError

KAKAO_AUTH_URL = "https://kauth.kakao.com/oauth/authorize"
KAKAO_TOKEN_URL = "https://kauth.kakao.com/oauth/token"
KAKAO_PROFILE_URL = "https://kapi.kakao.com/v2/user/me"


class KakaoOAuthProvider(OAuthProvider):
    provider = Provider.KAKAO
    authorize_url = KAKAO_AUTH_URL
    token_url = KAKAO_TOKEN_URL
    scopes = ("openid", "profile", "account_email")

    @property
    def user_info_url(self) -> str:
        return KAKAO_PROFILE_URL

    def _parse_user_info(self, payload: dict) -> OAuthUserInfo:
        kakao_id = payload.get("id")
        if kakao_id is None:
            raise OAuthProviderError("Kakao profile has no id")

        account = payload.get("kakao_account") or {}
        email = account.get("email")
        verified = bool(account.get("is_email_valid")) and bool(account.get("is_email_verified"))
        return OAuthUserInfo(
            provider_id=str(kakao_id),
            email=email,
            email_verified=bool(email) and verified,
        )
