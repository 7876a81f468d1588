"""
Statement preview helpers.

Splits preview text returned by the grant service into statements and prints
a numbered listing for confirmation.
"""

from rich.console import Console

console = Console()


def _process_line(
    line: str,
    current: list[str],
    in_single_quote: bool,
    in_double_quote: bool,
) -> tuple[list[str], bool, bool, list[str]]:
    """Scan one line, returning (carry, single, double, completed statements).

    A line may close several statements (`GRANT ...; GRANT ...;`).
    """
    completed: list[str] = []
    buffer = list(current)

    for char in line:
        if char == "'" and not in_double_quote:
            in_single_quote = not in_single_quote
        elif char == '"' and not in_single_quote:
            in_double_quote = not in_double_quote

        if char == ";" and not in_single_quote and not in_double_quote:
            statement = "".join(buffer).strip()
            if statement:
                completed.append(statement)
            buffer = []
            continue
        buffer.append(char)

    return buffer, in_single_quote, in_double_quote, completed


def split_sql_statements(sql_text: str) -> list[str]:
    """Split preview SQL into statements, keeping quoted semicolons.

    Lines that are entirely comment (start with --) and blank lines are
    skipped. Empty statements are dropped. A trailing statement without a
    semicolon is kept.

    Args:
        sql_text: Preview text from the grant service.

    Returns:
        Statements without their terminating semicolon, in order.
    """
    statements: list[str] = []
    current: list[str] = []
    in_single_quote = False
    in_double_quote = False

    for line in sql_text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("--"):
            continue

        current, in_single_quote, in_double_quote, completed = _process_line(
            line, current, in_single_quote, in_double_quote
        )
        statements.extend(completed)
        if "".join(current).strip():
            current.append("\n")
        else:
            current = []

    tail = "".join(current).strip()
    if tail:
        statements.append(tail)

    return statements


def print_sql_statements_preview(
    statements: list[str], title: str = "SQL Preview", action_prompt: str | None = None
) -> None:
    """Print a truncated listing of SQL statements for user confirmation.

    Args:
        statements: List of SQL statement strings.
        title: Section title.
        action_prompt: Optional line printed after the list.
    """
    console.print()
    console.print(f"[bold]{title}:[/bold]")
    console.print("─" * 60)
    if not statements:
        console.print("[yellow]No statements to run[/yellow]")
    for i, stmt in enumerate(statements, 1):
        console.print(f"\n[cyan]Statement {i}/{len(statements)}:[/cyan]")
        stmt_lines = stmt.strip().split("\n")
        if len(stmt_lines) <= 5:
            for line in stmt_lines:
                console.print(f"  {line}", markup=False, highlight=False)
        else:
            for line in stmt_lines[:3]:
                console.print(f"  {line}", markup=False, highlight=False)
            console.print(f"  ... ({len(stmt_lines) - 4} more lines)")
            console.print(f"  {stmt_lines[-1]}", markup=False, highlight=False)
    console.print()
    if action_prompt:
        console.print(f"[bold]{action_prompt}[/bold]")
