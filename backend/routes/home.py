from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from pages.home import render_home_page

router = APIRouter(tags=["home"])


@router.api_route("/", methods=["GET", "HEAD"], response_class=HTMLResponse)
async def home():
    return HTMLResponse(render_home_page())
