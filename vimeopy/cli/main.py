"""Vimeo CLI - Main commands."""
import asyncio
import json
import os
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn

app = typer.Typer(
    name="vimeo",
    help="Vimeo API CLI",
    add_completion=False
)
console = Console()


# Config path: ~/.config/vimeo/config.json
def get_config_path() -> Path:
    return Path.home() / ".config" / "vimeo" / "config.json"


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


def load_credentials(config: Optional[Path]):
    """Credentials from the JSON config file, overridden by VIMEO_* variables."""
    from vimeopy import Credentials

    path = config or get_config_path()
    if path.exists():
        credentials = Credentials.from_file(path)
    elif config is not None:
        console.print(f"[red]Config file not found: {config}[/red]")
        raise typer.Exit(1)
    else:
        credentials = Credentials()

    credentials.client_id = os.environ.get('VIMEO_CLIENT_ID', credentials.client_id)
    credentials.client_secret = os.environ.get('VIMEO_CLIENT_SECRET', credentials.client_secret)
    credentials.access_token = os.environ.get('VIMEO_ACCESS_TOKEN', credentials.access_token)
    return credentials


def create_client(config: Optional[Path]):
    from vimeopy import VimeoClient

    credentials = load_credentials(config)
    if not credentials.access_token and not (credentials.client_id and credentials.client_secret):
        console.print(
            "[red]No credentials. Set VIMEO_ACCESS_TOKEN or create "
            f"{get_config_path()}[/red]"
        )
        raise typer.Exit(1)
    return VimeoClient.from_credentials(credentials)


async def _upload_with_progress(client, file_path: Path, replace_uri: Optional[str], params: dict, strategy: Optional[str]) -> str:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console
    ) as progress:
        task = progress.add_task(f"Uploading {file_path.name}", total=file_path.stat().st_size)

        def on_progress(bytes_uploaded: int, bytes_total: int):
            progress.update(task, completed=bytes_uploaded, total=bytes_total)

        if replace_uri:
            return await client.replace(file_path, replace_uri, params, on_progress, strategy=strategy)
        return await client.upload(file_path, params, on_progress, strategy=strategy)


@app.command()
def upload(
    file_path: Path = typer.Argument(..., help="Local video file to upload", exists=True, dir_okay=False),
    name: str = typer.Option(None, "--name", "-n", help="Video title"),
    description: str = typer.Option(None, "--description", "-d", help="Video description"),
    strategy: str = typer.Option(None, "--strategy", "-s", help="Upload strategy: tus or streaming"),
    config: Path = typer.Option(None, "--config", "-c", help="JSON credentials file"),
):
    """Upload a new video."""
    from vimeopy import VimeoException

    params = {}
    if name:
        params['name'] = name
    if description:
        params['description'] = description

    async def do_upload():
        async with create_client(config) as vimeo:
            try:
                uri = await _upload_with_progress(vimeo, file_path, None, params, strategy)
            except VimeoException as e:
                console.print(f"[red]Upload failed: {e}[/red]")
                raise typer.Exit(1)

            console.print(f"[green]Uploaded:[/green] {uri}")

    run_async(do_upload())


@app.command()
def replace(
    file_path: Path = typer.Argument(..., help="Local video file", exists=True, dir_okay=False),
    video_uri: str = typer.Argument(..., help="URI of the video to replace, e.g. /videos/123"),
    strategy: str = typer.Option(None, "--strategy", "-s", help="Upload strategy: tus or streaming"),
    config: Path = typer.Option(None, "--config", "-c", help="JSON credentials file"),
):
    """Upload a new version of an existing video."""
    from vimeopy import VimeoException

    async def do_replace():
        async with create_client(config) as vimeo:
            try:
                uri = await _upload_with_progress(vimeo, file_path, video_uri, {}, strategy)
            except VimeoException as e:
                console.print(f"[red]Replace failed: {e}[/red]")
                raise typer.Exit(1)

            console.print(f"[green]Replaced:[/green] {uri}")

    run_async(do_replace())


@app.command()
def request(
    path: str = typer.Argument(..., help="API path, e.g. /me/videos"),
    method: str = typer.Option("GET", "--method", "-X", help="HTTP method"),
    query: str = typer.Option(None, "--query", "-q", help="JSON query parameters"),
    config: Path = typer.Option(None, "--config", "-c", help="JSON credentials file"),
):
    """Call an API endpoint and print the JSON response."""
    from vimeopy import VimeoException

    try:
        params = json.loads(query) if query else None
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid --query JSON: {e}[/red]")
        raise typer.Exit(1)

    async def do_request():
        async with create_client(config) as vimeo:
            try:
                response = await vimeo.request({
                    'path': path,
                    'method': method.upper(),
                    'query': params,
                })
            except VimeoException as e:
                console.print(f"[red]Request failed: {e}[/red]")
                raise typer.Exit(1)

            console.print(f"[dim]HTTP {response.status_code}[/dim]")
            console.print_json(data=response.body)

    run_async(do_request())


@app.command("auth-url")
def auth_url(
    redirect_uri: str = typer.Argument(..., help="Redirect URI registered for the app"),
    scope: List[str] = typer.Option(None, "--scope", help="Scope (repeatable)"),
    state: str = typer.Option(None, "--state", help="Unique state value"),
    config: Path = typer.Option(None, "--config", "-c", help="JSON credentials file"),
):
    """Print the URL users authorize the app at."""
    from vimeopy import VimeoClient

    credentials = load_credentials(config)
    if not credentials.client_id:
        console.print("[red]No client ID. Set VIMEO_CLIENT_ID or add it to the config file.[/red]")
        raise typer.Exit(1)

    client = VimeoClient.from_credentials(credentials)
    typer.echo(client.build_authorization_endpoint(redirect_uri, scope or None, state))


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
