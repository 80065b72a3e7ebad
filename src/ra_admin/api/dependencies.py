"""FastAPI dependency: require_admin_token.

Usage in any admin/cron router:
    from src.ra_admin.api.dependencies import require_admin_token

    @router.post("/protected", dependencies=[Depends(require_admin_token)])
    async def protected(): ...
"""

import secrets

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config.settings import settings
from src.ra_common.errors import UnauthorizedError

# auto_error=False so a missing header goes through our AppError envelope
_bearer_scheme = HTTPBearer(auto_error=False)


async def require_admin_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> None:
    """Compare the Bearer token against ADMIN_API_TOKEN in constant time."""
    if credentials is None or not secrets.compare_digest(
        credentials.credentials, settings.ADMIN_API_TOKEN
    ):
        raise UnauthorizedError()
