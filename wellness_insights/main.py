"""Wellness Insights MCP Server - Entry point.

Serves the insight tools over MCP streamable HTTP, behind bearer-key
authentication, with a health check for the hosting platform.
"""

import logging
import os

import uvicorn
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Mount, Route

from .shell.mcp_server import current_user_id, get_auth_client, mcp


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

SERVICE_NAME = "wellness-insights-mcp"
MCP_PATH_PREFIX = "/mcp"
DEFAULT_CORS_ORIGINS = "http://localhost:5173"


def bearer_token(request: Request) -> str | None:
    """API key from an `Authorization: Bearer <key>` header, if any."""
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def cors_origins() -> list[str]:
    """Allowed origins from CORS_ORIGINS (comma-separated)."""
    raw = os.environ.get("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


async def health_check(request: Request) -> JSONResponse:
    return JSONResponse({"status": "healthy", "service": SERVICE_NAME})


class AuthMiddleware(BaseHTTPMiddleware):
    """Resolve the bearer key of MCP requests to the current user.

    Requests without a key pass through unauthenticated, so tools answer
    with an empty state. A key that is presented but not recognized is
    rejected with 401.
    """

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith(MCP_PATH_PREFIX):
            return await call_next(request)

        api_key = bearer_token(request)
        if api_key is None:
            return await call_next(request)

        user_id = get_auth_client().validate_api_key(api_key)
        if user_id is None:
            return JSONResponse({"error": "Invalid API key"}, status_code=401)

        current_user_id.set(user_id)
        logger.debug("Authenticated user: %s", user_id[:8])
        return await call_next(request)


def create_app() -> Starlette:
    """Build the ASGI app: health check plus the MCP app mounted at root.

    The MCP app serves /mcp itself; its lifespan starts the session manager.
    """
    mcp_app = mcp.streamable_http_app()

    return Starlette(
        routes=[
            Route("/health", health_check, methods=["GET"]),
            Mount("/", app=mcp_app),
        ],
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=cors_origins(),
                allow_methods=["GET", "POST", "OPTIONS"],
                allow_headers=["*"],
            ),
            Middleware(AuthMiddleware),
        ],
        lifespan=mcp_app.router.lifespan_context,
    )


app = create_app()


def main() -> None:
    """Run the server."""
    port = int(os.environ.get("PORT", 8080))
    host = os.environ.get("HOST", "0.0.0.0")

    logger.info("Starting Wellness Insights MCP server on %s:%d", host, port)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
