"""Rich console output for ranked posts."""

from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.table import Table

from subreddit_listener.models.post import Listing, Post, UserPosts


class Console:
    """Wrapper for rich console output."""

    def __init__(self, verbose: bool = False, quiet: bool = False, console: RichConsole | None = None):
        self.console = console or RichConsole()
        self.verbose = verbose
        self.quiet = quiet

    def print(self, *args, **kwargs):
        """Print to console (respects quiet mode)."""
        if not self.quiet:
            self.console.print(*args, **kwargs)

    def print_error(self, message: str):
        """Print error message."""
        self.console.print(f"[red]Error:[/red] {message}")

    def print_warning(self, message: str):
        """Print warning message."""
        self.console.print(f"[yellow]Warning:[/yellow] {message}")

    def print_success(self, message: str):
        """Print success message."""
        if not self.quiet:
            self.console.print(f"[green]{message}[/green]")

    def print_header(self, subreddit: str):
        """Print listener header."""
        if self.quiet:
            return

        self.console.print()
        self.console.print(
            Panel(
                f"[bold blue]Subreddit Listener[/bold blue]\n[dim]Subreddit: r/{subreddit}[/dim]",
                expand=False,
            )
        )
        self.console.print()

    def print_top_posts(self, listing: Listing[Post]):
        """Print posts ranked by upvotes."""
        if self.quiet:
            return

        if not listing.data:
            self.console.print("[dim]No posts yet.[/dim]")
            return

        table = Table(title=f"Top {listing.count} Posts", expand=False)
        table.add_column("#", justify="right", style="dim")
        table.add_column("Up Votes", justify="right")
        table.add_column("Title")
        table.add_column("Author", style="cyan")
        if self.verbose:
            table.add_column("Link", style="dim")

        for rank, post in enumerate(listing.data, start=1):
            title = post.title if len(post.title) <= 70 else post.title[:67] + "..."
            row = [str(rank), str(post.upvotes), title, post.author]
            if self.verbose:
                row.append(post.url)
            table.add_row(*row)

        self.console.print(table)
        self.console.print()

    def print_top_users(self, listing: Listing[UserPosts]):
        """Print authors ranked by post count."""
        if self.quiet or not listing.data:
            return

        table = Table(title=f"Top {listing.count} Users", expand=False)
        table.add_column("#", justify="right", style="dim")
        table.add_column("Author", style="cyan")
        table.add_column("Posts", justify="right")

        for rank, user in enumerate(listing.data, start=1):
            table.add_row(str(rank), user.author, str(user.post_count))

        self.console.print(table)
        self.console.print()

    def print_output_path(self, path: str):
        """Print output file path."""
        if not self.quiet:
            self.console.print(f"\n[green]Report saved to:[/green] {path}")
