from subtrack.models.refresh_token import RefreshToken
from subtrack.models.user import User

__all__ = ["RefreshToken", "User"]
