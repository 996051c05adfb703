from .authenticator import ACCESS_TOKEN_PATH, Authenticator
from .token_util import EXPIRY_MARGIN_SECONDS, TokenInfo

__all__ = ["Authenticator", "TokenInfo", "ACCESS_TOKEN_PATH", "EXPIRY_MARGIN_SECONDS"]
