"""Random quote route."""

import logging

from fastapi import APIRouter, Request, Response

from models import Quote

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/quotes/random", response_model=Quote)
def random_quote(request: Request, response: Response) -> Quote:
    """Serve one random quote, from the cached batch when possible."""
    reader = request.app.state.reader
    quote, source = reader.get_random_quote()
    response.headers["X-Quote-Source"] = source.value
    return quote
