"""
Authentication — build token verification for route protection.

Builds publish templates with a JWT issued for the running build. The token
carries the pipelineId claim identifying the pipeline that owns the build and
a scope list that must include the configured build scope.
"""
import logging
from typing import List

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError

from template_registry.core.config import get_settings
from template_registry.core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)
security = HTTPBearer()


def decode_build_token(token: str) -> dict:
    """
    Verify a build token and return its claims.

    Raises:
        AuthenticationError: signing secret not configured
        JWTError: bad signature, malformed, or expired token
    """
    settings = get_settings()
    if not settings.build_token_secret:
        raise AuthenticationError("BUILD_TOKEN_SECRET is not configured")
    return jwt.decode(
        token,
        settings.build_token_secret,
        algorithms=[settings.build_token_algorithm],
    )


def _scope_list(claims: dict) -> List[str]:
    scope = claims.get("scope", [])
    if isinstance(scope, str):
        return scope.split()
    return list(scope)


async def get_build_credentials(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> dict:
    """
    Validate the build token and return the calling build's identity.

    Returns a dict with pipeline_id, username and scope.
    """
    token = credentials.credentials

    try:
        claims = decode_build_token(token)
    except JWTError as e:
        logger.warning(f"Authentication failed - JWT error: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "code": "UNAUTHORIZED",
                "message": f"Invalid or expired token: {str(e)}",
            },
        )
    except AuthenticationError as e:
        logger.error(f"Authentication unavailable: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "UNAUTHORIZED", "message": "Authentication failed"},
        )

    pipeline_id = claims.get("pipelineId")
    if pipeline_id is None:
        logger.warning("Authentication failed - missing pipelineId in token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "code": "UNAUTHORIZED",
                "message": "Invalid token: missing pipelineId",
            },
        )

    scope = _scope_list(claims)
    required = get_settings().build_token_scope
    if required not in scope:
        logger.warning(f"Access denied - token for pipeline {pipeline_id} lacks scope {required}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "code": "FORBIDDEN",
                "message": f"Access denied. Required scope: {required}",
            },
        )

    try:
        pipeline_id = int(pipeline_id)
    except (TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "UNAUTHORIZED", "message": "Invalid token: bad pipelineId"},
        )

    logger.debug(f"Authentication successful - pipeline_id: {pipeline_id}")
    return {
        "pipeline_id": pipeline_id,
        "username": claims.get("sub"),
        "scope": scope,
    }
