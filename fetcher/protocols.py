"""Protocol definitions for request dispatch."""

from typing import Optional, Protocol, Union, runtime_checkable

from yarl import URL

from fetcher.context import Context
from fetcher.http.request import Request, RequestOption
from fetcher.http.response import Response


@runtime_checkable
class Fetcher(Protocol):
  """Anything that can execute requests.

  ``fetcher.http.Client`` is the concrete implementation; tests and callers
  can substitute any object with the same methods.
  """

  async def do(self, request: Request, ctx: Optional[Context] = None) -> Response:
    ...

  async def get(self, url: Union[str, URL], *options: RequestOption, ctx: Optional[Context] = None) -> Response:
    ...

  async def head(self, url: Union[str, URL], *options: RequestOption, ctx: Optional[Context] = None) -> Response:
    ...

  async def post(self, url: Union[str, URL], *options: RequestOption, ctx: Optional[Context] = None) -> Response:
    ...

  async def put(self, url: Union[str, URL], *options: RequestOption, ctx: Optional[Context] = None) -> Response:
    ...

  async def patch(self, url: Union[str, URL], *options: RequestOption, ctx: Optional[Context] = None) -> Response:
    ...

  async def delete(self, url: Union[str, URL], *options: RequestOption, ctx: Optional[Context] = None) -> Response:
    ...
