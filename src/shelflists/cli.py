"""Command-line interface for shelflists.

Built with Typer for commands and Rich for beautiful output.
"""

import logging
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .config import get_config
from .db import get_db
from .db.schemas import BookCreate
from .errors import validation_failure
from .identity import EnvIdentityResolver, require_owner
from .lists.schemas import ListType, ListVisibility
from .results import Result

# Create the main app
app = typer.Typer(
    name="shelflists",
    help="Organize your books into reading lists and ranked favorites.",
    no_args_is_help=True,
)

# Create sub-apps for command groups
books_app = typer.Typer(help="Add and list your books.")
app.add_typer(books_app, name="books")
lists_app = typer.Typer(help="Manage reading lists and the books in them.")
app.add_typer(lists_app, name="lists")
favorites_app = typer.Typer(help="Manage your six ranked favorite books.")
app.add_typer(favorites_app, name="favorites")

# Rich console for pretty output
console = Console()

# Options shared by every command, set by the app callback
state: dict[str, Optional[str]] = {"owner": None}


# ============================================================================
# Helper Functions
# ============================================================================


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[dim]{message}[/dim]")


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def current_owner() -> str:
    """Resolve the acting owner or exit."""
    return unwrap(require_owner(EnvIdentityResolver(), {"owner": state["owner"]}))


def unwrap(result: Result):
    """Return a successful result's payload, or print its error and exit."""
    if not result:
        print_error(result.message or result.error.value)
        raise typer.Exit(1)
    return result.data


def resolve_list_id(owner_id: str, value: str) -> str:
    """Accept a list ID or a case-insensitive fragment of its title."""
    from .lists import ReadingListManager

    summaries = unwrap(ReadingListManager(get_db()).get_user_lists(owner_id))
    for summary in summaries:
        if str(summary.id) == value:
            return value
    matching = [s for s in summaries if value.lower() in s.title.lower()]
    if not matching:
        # Let the manager report NotFound / ownership for unknown ids
        return value
    return str(matching[0].id)


@app.callback()
def main_callback(
    owner: Optional[str] = typer.Option(
        None, "--owner", "-o", help="Act as this owner (defaults to SHELFLISTS_OWNER)"
    ),
) -> None:
    """Organize your books into reading lists and ranked favorites."""
    config = get_config()
    setup_logging(config.log_level)
    state["owner"] = owner


# ============================================================================
# Book Commands
# ============================================================================


@books_app.command("add")
def books_add(
    title: str = typer.Option(..., "--title", "-t", help="Book title"),
    author: str = typer.Option(..., "--author", "-a", help="Author"),
    isbn: Optional[str] = typer.Option(None, "--isbn", "-i", help="ISBN"),
    cover: Optional[str] = typer.Option(None, "--cover", help="Cover image URL"),
) -> None:
    """Add a book to your library."""
    owner_id = current_owner()
    try:
        payload = BookCreate(owner_id=owner_id, title=title, author=author, isbn=isbn, cover=cover)
    except ValidationError as e:
        print_error(validation_failure(e).message)
        raise typer.Exit(1)

    book = get_db().create_book(payload)
    print_success(f"Added: {book.title} by {book.author}")
    console.print(f"[dim]ID: {book.id}[/dim]")


@books_app.command("list")
def books_list() -> None:
    """Show your books."""
    owner_id = current_owner()
    books = get_db().get_books_by_owner(owner_id)

    if not books:
        print_info("No books found")
        return

    table = Table(title=f"Books ({len(books)})", show_header=True, header_style="bold magenta")
    table.add_column("Title", style="cyan", max_width=40)
    table.add_column("Author", style="green", max_width=25)
    table.add_column("ID", style="dim")

    for book in books:
        table.add_row(book.title, book.author, book.id)

    console.print(table)


# ============================================================================
# Reading Lists Commands
# ============================================================================


@lists_app.command("create")
def lists_create(
    title: str = typer.Argument(..., help="List title"),
    description: Optional[str] = typer.Option(None, "--desc", "-d", help="Description"),
    visibility: ListVisibility = typer.Option(
        ListVisibility.PRIVATE, "--visibility", "-v", help="Who can see the list"
    ),
    list_type: ListType = typer.Option(ListType.STANDARD, "--type", "-t", help="List type"),
    year: Optional[str] = typer.Option(None, "--year", "-y", help="Year, for favorites_year lists"),
) -> None:
    """Create a new reading list."""
    from .lists import ReadingListManager

    owner_id = current_owner()
    result = unwrap(
        ReadingListManager(get_db()).create_list(
            owner_id,
            title,
            description=description,
            visibility=visibility,
            list_type=list_type,
            year=year,
        )
    )

    console.print(Panel(
        f"[bold]{result.title}[/bold]\n"
        f"Type: {result.type_display}\n"
        f"Visibility: {result.visibility.value}",
        title="[green]List Created[/green]",
    ))
    console.print(f"\n[dim]ID: {result.id}[/dim]")


@lists_app.command("list")
def lists_list() -> None:
    """Show all your reading lists."""
    from .lists import ReadingListManager

    owner_id = current_owner()
    lists = unwrap(ReadingListManager(get_db()).get_user_lists(owner_id))

    if not lists:
        print_info("No reading lists found")
        return

    table = Table(title=f"Reading Lists ({len(lists)})")
    table.add_column("Title")
    table.add_column("Type")
    table.add_column("Visibility")
    table.add_column("Books", justify="right")
    table.add_column("ID", style="dim")

    for lst in lists:
        table.add_row(
            lst.title,
            lst.type_display,
            lst.visibility.value,
            str(lst.book_count),
            str(lst.id),
        )

    console.print(table)


@lists_app.command("show")
def lists_show(
    list_id: str = typer.Argument(..., help="List ID or title"),
) -> None:
    """Show a reading list with its books."""
    from .lists import ReadingListManager

    owner_id = current_owner()
    result = unwrap(
        ReadingListManager(get_db()).get_list_with_books(
            owner_id, resolve_list_id(owner_id, list_id)
        )
    )

    lst = result.list
    content = f"""[bold]{lst.title}[/bold]
Type: {lst.type_display}
Visibility: {lst.visibility.value}
Books: {len(result.books)}

{lst.description or '[dim]No description[/dim]'}"""

    console.print(Panel(content, title="[blue]Reading List[/blue]"))

    if result.books:
        table = Table(title="Books")
        table.add_column("Position", justify="right")
        table.add_column("Title")
        table.add_column("Author")
        table.add_column("Notes")

        for book in result.books:
            table.add_row(
                str(book.position),
                book.book_title or f"[dim]{book.book_id}[/dim]",
                book.book_author or "[dim]Unknown[/dim]",
                book.notes or "",
            )

        console.print(table)
    else:
        print_info("No books in this list yet")

    console.print(f"\n[dim]ID: {lst.id}[/dim]")


@lists_app.command("update")
def lists_update(
    list_id: str = typer.Argument(..., help="List ID or title"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="New title"),
    description: Optional[str] = typer.Option(None, "--desc", "-d", help="New description"),
    visibility: Optional[ListVisibility] = typer.Option(
        None, "--visibility", "-v", help="New visibility"
    ),
    cover_image: Optional[str] = typer.Option(None, "--cover", help="Cover image reference"),
) -> None:
    """Update a reading list's title, description, visibility or cover."""
    from .lists import ReadingListManager

    owner_id = current_owner()
    result = unwrap(
        ReadingListManager(get_db()).update_list(
            owner_id,
            resolve_list_id(owner_id, list_id),
            title=title,
            description=description,
            visibility=visibility,
            cover_image=cover_image,
        )
    )
    print_success(f"Updated '{result.title}'")


@lists_app.command("delete")
def lists_delete(
    list_id: str = typer.Argument(..., help="List ID or title"),
    confirm: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a reading list. The books themselves are kept."""
    from .lists import ReadingListManager

    owner_id = current_owner()
    manager = ReadingListManager(get_db())
    lst = unwrap(manager.get_list(owner_id, resolve_list_id(owner_id, list_id)))

    if not confirm:
        console.print(f"Delete list '[bold]{lst.title}[/bold]'?")
        if not typer.confirm("Confirm?"):
            print_info("Cancelled")
            return

    unwrap(manager.delete_list(owner_id, lst.id))
    console.print(f"[green]Deleted list '{lst.title}'[/green]")


@lists_app.command("add")
def lists_add(
    list_id: str = typer.Argument(..., help="List ID or title"),
    book_id: str = typer.Argument(..., help="Book ID to add"),
    position: Optional[int] = typer.Option(None, "--position", "-p", help="Explicit position"),
) -> None:
    """Add a book to a reading list."""
    from .lists import MembershipManager

    owner_id = current_owner()
    result = unwrap(
        MembershipManager(get_db()).add_membership(
            owner_id, resolve_list_id(owner_id, list_id), book_id, position
        )
    )
    console.print(f"[green]Added book to list at position {result.position}[/green]")


@lists_app.command("remove")
def lists_remove(
    list_id: str = typer.Argument(..., help="List ID or title"),
    book_id: str = typer.Argument(..., help="Book ID to remove"),
) -> None:
    """Remove a book from a reading list."""
    from .lists import MembershipManager

    owner_id = current_owner()
    unwrap(
        MembershipManager(get_db()).remove_membership(
            owner_id, resolve_list_id(owner_id, list_id), book_id
        )
    )
    console.print("[green]Book removed from list[/green]")


@lists_app.command("notes")
def lists_notes(
    list_id: str = typer.Argument(..., help="List ID or title"),
    book_id: str = typer.Argument(..., help="Book ID"),
    notes: str = typer.Argument("", help="Notes; leave empty to clear"),
) -> None:
    """Set the notes on a book in a reading list."""
    from .lists import MembershipManager

    owner_id = current_owner()
    result = unwrap(
        MembershipManager(get_db()).update_notes(
            owner_id, resolve_list_id(owner_id, list_id), book_id, notes
        )
    )
    if result.notes:
        print_success("Notes saved")
    else:
        print_success("Notes cleared")


@lists_app.command("reorder")
def lists_reorder(
    list_id: str = typer.Argument(..., help="List ID or title"),
    book_ids: list[str] = typer.Argument(..., help="Every book ID in the list, in the new order"),
) -> None:
    """Reorder a reading list. All of its books must be given."""
    from .lists import ListReorderer

    owner_id = current_owner()
    unwrap(
        ListReorderer(get_db()).reorder_memberships(
            owner_id, resolve_list_id(owner_id, list_id), book_ids
        )
    )
    print_success(f"Reordered {len(book_ids)} books")


# ============================================================================
# Favorites Commands
# ============================================================================


@favorites_app.command("set")
def favorites_set(
    book_id: str = typer.Argument(..., help="Book ID"),
    slot: int = typer.Argument(..., help="Slot 1-6"),
    year: Optional[str] = typer.Option(None, "--year", "-y", help="Favorites of this year"),
) -> None:
    """Put a book in a favorite slot, creating the favorites list if needed."""
    from .favorites import FavoritesManager

    owner_id = current_owner()
    unwrap(FavoritesManager(get_db()).set_favorite(owner_id, book_id, slot, year))
    scope = year or "all time"
    print_success(f"Book is now favorite #{slot} ({scope})")


@favorites_app.command("remove")
def favorites_remove(
    book_id: str = typer.Argument(..., help="Book ID"),
    year: Optional[str] = typer.Option(None, "--year", "-y", help="Favorites of this year"),
) -> None:
    """Remove a book from favorites."""
    from .favorites import FavoritesManager

    owner_id = current_owner()
    unwrap(FavoritesManager(get_db()).remove_favorite(owner_id, book_id, year))
    print_success("Removed from favorites")


@favorites_app.command("show")
def favorites_show(
    year: Optional[str] = typer.Option(None, "--year", "-y", help="Favorites of this year"),
) -> None:
    """Show your favorites in slot order."""
    from .favorites import FavoritesManager, favorites_title

    owner_id = current_owner()
    favorites = unwrap(FavoritesManager(get_db()).fetch_favorites(owner_id, year))
    label = favorites_title(year)

    if not favorites:
        print_info(f"No favorites yet ({label})")
        return

    table = Table(title=label)
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Title")
    table.add_column("Author", style="green")

    for favorite in favorites:
        table.add_row(str(favorite.slot), favorite.book.title, favorite.book.author)

    console.print(table)


@favorites_app.command("years")
def favorites_years() -> None:
    """List the years you keep favorites for."""
    from .favorites import FavoritesManager

    owner_id = current_owner()
    years = unwrap(FavoritesManager(get_db()).fetch_available_years(owner_id))

    if not years:
        print_info("No yearly favorites yet")
        return

    console.print(", ".join(str(year) for year in years))


# ============================================================================
# Version Command
# ============================================================================


@app.command()
def version() -> None:
    """Show version information."""
    from . import __version__

    console.print(f"shelflists version {__version__}")


# ============================================================================
# Main Entry Point
# ============================================================================


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
