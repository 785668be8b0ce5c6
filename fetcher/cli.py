"""Command-line interface for issuing single requests."""

import asyncio
import sys

import click

from fetcher.config import ConfigLoader, FetcherConfig, with_handshake_timeout, with_keep_alive
from fetcher.context import Context
from fetcher.exceptions import FetcherError
from fetcher.http import Client, new_request, with_body, with_header, with_max_attempts
from fetcher.logging import configure_logging


def _parse_header(value: str) -> tuple:
  name, sep, content = value.partition(":")
  if not sep or not name.strip():
    raise click.BadParameter(f"expected 'Name: value', got {value!r}", param_hint="--header")
  return name.strip(), content.strip()


async def _run(
  config: FetcherConfig,
  method: str,
  url: str,
  headers: list,
  data,
  max_attempts,
  keep_alive,
  handshake_timeout,
  timeout,
):
  transport_options = []
  if keep_alive is not None:
    transport_options.append(with_keep_alive(keep_alive))
  if handshake_timeout is not None:
    transport_options.append(with_handshake_timeout(handshake_timeout))

  request_options = config.request_options()
  for name, value in headers:
    request_options.append(with_header(name, value))
  if data is not None:
    request_options.append(with_body(data))
  if max_attempts is not None:
    request_options.append(with_max_attempts(max_attempts))

  ctx = Context.background()
  if timeout is not None:
    ctx = ctx.with_timeout(timeout)

  async with Client.from_config(config, *transport_options) as client:
    request = new_request(method.upper(), url, *request_options)
    response = await client.do(request, ctx)
    body = await response.read()
    return response.status, response.reason, response.attempts, body


@click.command()
@click.argument("method")
@click.argument("url")
@click.option("-H", "--header", "headers", multiple=True, help="Request header as 'Name: value' (repeatable)")
@click.option("-d", "--data", help="Request body; prefix with @ to read from a file")
@click.option("--max-attempts", type=click.IntRange(min=1), help="Attempts allowed on 5xx responses")
@click.option("--keep-alive", type=float, help="Keep-alive for pooled connections in seconds")
@click.option("--handshake-timeout", type=float, help="Connection and TLS handshake timeout in seconds")
@click.option("--timeout", type=float, help="Overall deadline for the request in seconds")
@click.option(
  "--config-dir",
  type=click.Path(exists=True, file_okay=False),
  help="Directory holding fetcher configuration files",
)
@click.option("--config", "config_name", default="fetcher", help="Configuration name (filename without .yaml)")
@click.option("--fail", is_flag=True, help="Exit with status 22 on HTTP status >= 400")
@click.option("--verbose", is_flag=True, help="Enable debug logging")
def main(
  method,
  url,
  headers,
  data,
  max_attempts,
  keep_alive,
  handshake_timeout,
  timeout,
  config_dir,
  config_name,
  fail,
  verbose,
):
  """Send one HTTP request and print the response.

  Server errors are retried up to --max-attempts times; the last response is
  printed either way.
  """
  configure_logging(debug_mode=verbose, log_level=None if verbose else "WARNING", structured=False)

  parsed_headers = [_parse_header(h) for h in headers]

  if data is not None and data.startswith("@"):
    try:
      with open(data[1:], "rb") as f:
        data = f.read()
    except OSError as e:
      raise click.BadParameter(f"cannot read {data[1:]!r}: {e.strerror or e}", param_hint="--data")

  try:
    config = ConfigLoader(config_dir).load_config(config_name) if config_dir else FetcherConfig()
    status, reason, attempts, body = asyncio.run(
      _run(config, method, url, parsed_headers, data, max_attempts, keep_alive, handshake_timeout, timeout)
    )
  except FetcherError as e:
    click.echo(f"Error: {e}", err=True)
    sys.exit(1)

  click.echo(f"HTTP {status} {reason or ''}".rstrip() + f" (attempts: {attempts})", err=True)
  if body:
    click.echo(body.decode("utf-8", errors="replace"))

  if fail and status >= 400:
    sys.exit(22)


if __name__ == "__main__":
  main()
