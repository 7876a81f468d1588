"""Rich-backed notifier used by the CLI."""

from rich.console import Console


class ConsoleNotifier:
    """Prints workflow notices to the terminal."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)

    def info(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]⚠️  {message}[/yellow]")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗ {message}[/red]")
