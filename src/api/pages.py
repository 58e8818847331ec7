"""Landing pages reached through the route gate.

Rendering is handled by the front end; these placeholders only give the
gate's redirect targets something to serve.
"""

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter(tags=["Pages"], include_in_schema=False)

PAGE_TITLES = {
    "/login": "Sign in",
    "/register": "Create account",
    "/users": "Users",
    "/dashboard": "Dashboard",
    "/profile": "Profile",
}


def _page(title: str) -> HTMLResponse:
    return HTMLResponse(
        f"<!doctype html><html><head><title>{title}</title></head>"
        f"<body><h1>{title}</h1></body></html>"
    )


def _register_page(path: str, title: str) -> None:
    async def page() -> HTMLResponse:
        return _page(title)

    page.__name__ = f"page_{path.strip('/')}"
    router.add_api_route(path, page, methods=["GET"], response_class=HTMLResponse)


for _path, _title in PAGE_TITLES.items():
    _register_page(_path, _title)
