"""Health endpoints."""

from fastapi import Request, Response

from anime_api.routes.routers import status_check_bp

AWESOME_RESPONSE: int = 200


@status_check_bp.get("/ping")
async def ping() -> str:
    """Just a ping pong handle.

    Returns:
        str: A message indicating successful response.
    """
    return "pong"


@status_check_bp.get("/health_checker")
async def health_checker() -> Response:
    """Report that the service is responding."""
    return Response(status_code=AWESOME_RESPONSE)


@status_check_bp.get("/url_list")
def get_all_urls(request: Request) -> list[dict[str, str]]:
    """List the routes registered on the app.

    Args:
        request (Request): The request object.

    Returns:
        List[Dict[str, str]]: Path and name of each route.
    """
    return [
        {"path": route.path, "name": getattr(route, "name", None) or ""}
        for route in request.app.routes
        if getattr(route, "path", None) is not None
    ]
