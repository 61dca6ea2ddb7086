"""CLI entrypoint for index-courier."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import List, Optional

import requests
import typer

app = typer.Typer(name="idxc", help="index-courier command-line interface")
indices_app = typer.Typer(name="indices", help="Create or delete indices")
app.add_typer(indices_app, name="indices")

DEFAULT_HOST = "http://127.0.0.1:8600"


def _resolve_host(override: Optional[str]) -> str:
    if override:
        return override.rstrip('/')
    env_host = os.environ.get("IDXC_HOST")
    if env_host:
        return env_host.rstrip('/')
    return DEFAULT_HOST


def _request(method: str, path: str, host: Optional[str] = None, **kwargs) -> requests.Response:
    base = _resolve_host(host)
    url = f"{base}{path}"
    try:
        resp = requests.request(method, url, timeout=300, **kwargs)
    except requests.RequestException as exc:
        typer.echo(f"Request failed: {exc}", err=True)
        raise typer.Exit(code=1)
    if not resp.ok:
        try:
            detail = resp.json()
        except ValueError:
            detail = resp.text
        typer.echo(f"Request failed ({resp.status_code}): {detail}", err=True)
        raise typer.Exit(code=1)
    return resp


def _load_json(raw: str, what: str) -> dict:
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        typer.echo(f"Invalid {what}: {exc}", err=True)
        raise typer.Exit(code=2)
    if not isinstance(value, dict):
        typer.echo(f"Invalid {what}: expected a JSON object", err=True)
        raise typer.Exit(code=2)
    return value


@app.command()
def serve(
    bind: str = typer.Option("127.0.0.1", "--bind", help="Interface to listen on"),
    port: int = typer.Option(8600, "--port", help="Port to listen on"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the HTTP service."""
    import uvicorn

    uvicorn.run("index_courier.app:app", host=bind, port=port, reload=reload)


@app.command()
def collect(
    index: str = typer.Argument(..., help="Index to read from"),
    query: str = typer.Option('{"query": {"match_all": {}}}', "--query", help="Query body as JSON"),
    page_size: Optional[int] = typer.Option(None, "--page-size", min=1, help="Hits per page"),
    max_pages: Optional[int] = typer.Option(None, "--max-pages", min=1, help="Stop after this many pages"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Collect a result set page by page."""
    payload: dict[str, object] = {"index": index, "query": _load_json(query, "query")}
    if page_size is not None:
        payload["page_size"] = page_size
    if max_pages is not None:
        payload["max_pages"] = max_pages
    resp = _request("POST", "/collect", host=host, json=payload)
    data = resp.json()
    typer.echo(json.dumps(data, indent=2))
    if data.get("error"):
        raise typer.Exit(code=1)


@app.command()
def bulk(
    index: str = typer.Argument(..., help="Index to write to"),
    ops_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON lines file of ops"),
    chunk_size: Optional[int] = typer.Option(None, "--chunk-size", min=1, help="Ops per bulk request"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Submit create/upsert/delete ops read from a JSON lines file."""
    ops = []
    with ops_file.open("r", encoding="utf-8") as fh:
        for line_no, line in enumerate(fh, start=1):
            if line.strip():
                ops.append(_load_json(line, f"op on line {line_no}"))
    payload: dict[str, object] = {"index": index, "ops": ops}
    if chunk_size is not None:
        payload["chunk_size"] = chunk_size
    resp = _request("POST", "/bulk", host=host, json=payload)
    data = resp.json()
    typer.echo(json.dumps(data, indent=2))
    if not data.get("ok"):
        raise typer.Exit(code=1)


@app.command()
def delete(
    index: str = typer.Argument(..., help="Index to delete from"),
    ids: List[str] = typer.Argument(..., help="Document identifiers"),
    chunk_size: Optional[int] = typer.Option(None, "--chunk-size", min=1, help="Ids per bulk request"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Delete documents by identifier."""
    payload: dict[str, object] = {"index": index, "ids": list(ids)}
    if chunk_size is not None:
        payload["chunk_size"] = chunk_size
    resp = _request("POST", "/delete", host=host, json=payload)
    data = resp.json()
    typer.echo(json.dumps(data, indent=2))
    if not data.get("ok"):
        raise typer.Exit(code=1)


@indices_app.command("create")
def create_index(
    index: str = typer.Argument(..., help="Index name"),
    body: Optional[Path] = typer.Option(None, "--body", exists=True, dir_okay=False, help="JSON settings/mappings file"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Create an index."""
    payload = _load_json(body.read_text(encoding="utf-8"), "index body") if body else None
    resp = _request("PUT", f"/indices/{index}", host=host, json=payload)
    typer.echo(json.dumps(resp.json(), indent=2))


@indices_app.command("delete")
def delete_index(
    index: str = typer.Argument(..., help="Index name"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Delete an index."""
    resp = _request("DELETE", f"/indices/{index}", host=host)
    typer.echo(json.dumps(resp.json(), indent=2))


if __name__ == "__main__":
    app()
