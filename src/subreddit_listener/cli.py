"""CLI interface for Subreddit Listener."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from subreddit_listener import __version__
from subreddit_listener.config import get_config
from subreddit_listener.exceptions import ConfigurationError
from subreddit_listener.output.console import Console as OutputConsole
from subreddit_listener.output.json_writer import build_report, write_json_report
from subreddit_listener.sdk import SubredditListenerSDK

app = typer.Typer(
    name="subreddit-listener",
    help="Listen to a subreddit and rank its new posts",
    add_completion=False,
)

console = Console()


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Route log records through rich, with timestamps."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%x %X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        console.print(f"subreddit-listener version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """Subreddit Listener - Rank new posts in a subreddit."""
    pass


def _load_config(subreddit: Optional[str], since: Optional[int]):
    output_console = OutputConsole(console=console)
    try:
        config = get_config()
    except ConfigurationError as e:
        output_console.print_error(f"Configuration error: {e}")
        raise typer.Exit(1)

    if subreddit:
        config.subreddit_name = subreddit
    if since is not None:
        config.application_start_time = since

    if not config.is_configured:
        output_console.print_error(f"Missing settings: {', '.join(config.missing_settings)}")
        console.print("Run 'subreddit-listener check-config' for details.")
        raise typer.Exit(1)

    return config


@app.command()
def fetch(
    subreddit: Optional[str] = typer.Option(
        None,
        "--subreddit",
        "-s",
        help="Subreddit to read (overrides SUBREDDIT_NAME)",
    ),
    since: Optional[int] = typer.Option(
        None,
        "--since",
        help="Only include posts created at or after this unix timestamp",
    ),
    posts: int = typer.Option(10, "--posts", "-n", min=1, help="Number of posts to rank"),
    users: int = typer.Option(10, "--users", "-u", min=1, help="Number of users to rank"),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the ranked view to this JSON file",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Minimal output"),
):
    """Fetch new posts once and print the ranked view.

    Examples:
        subreddit-listener fetch --subreddit python
        subreddit-listener fetch --since 1700000000 --output top.json
    """
    setup_logging(verbose, quiet)
    config = _load_config(subreddit, since)

    try:
        synchronized = asyncio.run(
            _run_fetch(
                posts_count=posts,
                users_count=users,
                output_path=output,
                verbose=verbose,
                quiet=quiet,
                config=config,
            )
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Fetch cancelled[/yellow]")
        raise typer.Exit(1)

    if not synchronized:
        raise typer.Exit(1)


async def _run_fetch(posts_count, users_count, output_path, verbose, quiet, config) -> bool:
    """Run one synchronization asynchronously.

    Returns:
        False if the synchronization failed
    """
    output_console = OutputConsole(verbose=verbose, quiet=quiet, console=console)
    output_console.print_header(config.subreddit_name)

    async with SubredditListenerSDK(config) as sdk:
        stored = await sdk.synchronize()
        error = sdk.last_error
        top_posts = await sdk.top_posts(posts_count)
        top_users = await sdk.top_users(users_count)

    output_console.print_top_posts(top_posts)
    output_console.print_top_users(top_users)

    if output_path is not None:
        report = build_report(config.subreddit_name, top_posts, top_users)
        written = write_json_report(report, output_path)
        output_console.print_output_path(str(written))

    if error is not None:
        output_console.print_warning(
            f"Synchronization failed after {stored} posts from r/{config.subreddit_name}: {error}"
        )
        return False

    output_console.print_success(f"Fetched {stored} posts from r/{config.subreddit_name}")
    return True


@app.command()
def listen(
    subreddit: Optional[str] = typer.Option(
        None,
        "--subreddit",
        "-s",
        help="Subreddit to listen to (overrides SUBREDDIT_NAME)",
    ),
    interval: Optional[float] = typer.Option(
        None,
        "--interval",
        "-i",
        min=1,
        help="Seconds between synchronizations (overrides POLL_INTERVAL_SECONDS)",
    ),
    since: Optional[int] = typer.Option(
        None,
        "--since",
        help="Only include posts created at or after this unix timestamp",
    ),
    posts: int = typer.Option(10, "--posts", "-n", min=1, help="Number of posts to rank"),
    users: int = typer.Option(5, "--users", "-u", min=1, help="Number of users to rank"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Minimal output"),
):
    """Keep polling a subreddit and print the ranked view after every run.

    Press Ctrl-C to stop.
    """
    setup_logging(verbose, quiet)
    config = _load_config(subreddit, since)

    try:
        asyncio.run(_run_listen(interval, posts, users, verbose, quiet, config))
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped listening[/yellow]")


async def _run_listen(interval, posts_count, users_count, verbose, quiet, config):
    """Run the periodic listener asynchronously."""
    output_console = OutputConsole(verbose=verbose, quiet=quiet, console=console)
    output_console.print_header(config.subreddit_name)

    async with SubredditListenerSDK(config) as sdk:

        async def print_ranking(stored: int) -> None:
            if sdk.last_error is not None:
                output_console.print_warning(f"Synchronization failed: {sdk.last_error}")
            output_console.print(f"[dim]Stored {stored} posts[/dim]")
            output_console.print_top_posts(await sdk.top_posts(posts_count))
            output_console.print_top_users(await sdk.top_users(users_count))

        await sdk.run(interval, on_synchronized=print_ranking)


@app.command()
def check_config():
    """Check Reddit credentials and settings."""
    output_console = OutputConsole(console=console)
    try:
        config = get_config()
    except ConfigurationError as e:
        output_console.print_error(f"Configuration error: {e}")
        raise typer.Exit(1)

    if config.is_configured:
        console.print("[green]All required settings are configured[/green]")
    else:
        output_console.print_warning("Missing settings:")
        for name in config.missing_settings:
            console.print(f"  {name}")
        console.print()
        console.print("Create a 'script' app at: https://www.reddit.com/prefs/apps")

    console.print(f"Subreddit: {config.subreddit_name or '-'}")
    console.print(f"User-Agent: {config.user_agent}")
    console.print(f"API: {config.reddit_api_base_address}")
    console.print(f"Poll interval: {config.poll_interval:g} seconds")

    if not config.is_configured:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
