import logging
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from employee_portal.core.errors import Forbidden, Unauthenticated
from employee_portal.core.permissions import Action, is_allowed
from employee_portal.core.security import Claims, decode_token

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/login", auto_error=False)

async def get_current_claims(request: Request, token: str | None = Depends(oauth2_scheme)) -> Claims:
    # CORS preflight is answered by CORSMiddleware before any route dependency runs.
    if not token:
        raise Unauthenticated()
    claims = decode_token(token)
    request.state.claims = claims
    return claims

def require(resource: str, action: Action):
    """Dependency factory: authenticate, then check the permission table."""

    async def dependency(claims: Claims = Depends(get_current_claims)) -> Claims:
        if not is_allowed(claims.role, resource, action):
            logger.warning(
                "Denied %s %s for user %s (role=%s)",
                action.value, resource, claims.user_id, claims.role.value,
            )
            raise Forbidden()
        return claims

    return dependency
