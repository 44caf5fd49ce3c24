"""JWT helpers: token claims for shoppers/admins and optional authentication"""
import logging

from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken, AuthenticationFailed

logger = logging.getLogger(__name__)

TOKEN_TYPE_USER = 'user'
TOKEN_TYPE_ADMIN = 'admin'


def issue_tokens(user, token_type=TOKEN_TYPE_USER):
    """Build a refresh/access token pair carrying the shop claims"""
    from .serializers import UserTokenObtainPairSerializer

    refresh = UserTokenObtainPairSerializer.get_token(user)
    refresh['type'] = token_type
    return {
        'access': str(refresh.access_token),
        'refresh': str(refresh),
    }


class OptionalJWTAuthentication(JWTAuthentication):
    """
    Bearer authentication that never rejects a request.

    A missing, malformed or expired token leaves the request anonymous.
    Used by guest-checkout endpoints that attach the user when one is known.
    """

    def authenticate(self, request):
        try:
            return super().authenticate(request)
        except (InvalidToken, AuthenticationFailed) as e:
            logger.debug(f"Ignoring invalid token on optional-auth endpoint: {str(e)}")
            return None
