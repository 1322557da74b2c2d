"""CORS stage answering accepted preflights with an empty 204."""

from fastapi.middleware.cors import CORSMiddleware
from starlette.datastructures import Headers
from starlette.responses import Response

_BODY_HEADER_NAMES = ("content-length", "content-type")


class PortalCORSMiddleware(CORSMiddleware):
    """Starlette CORS middleware whose accepted preflights carry no body.

    Rejected preflights keep Starlette's 400 response.
    """

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != 200:
            return response
        headers = {name: value for name, value in response.headers.items() if name not in _BODY_HEADER_NAMES}
        return Response(status_code=204, headers=headers)
