"""CLI interface for the kinship graph."""

from datetime import date, datetime
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import KinshipConfig
from .exceptions import KinshipError

app = typer.Typer(
    name="kinship",
    help="Bidirectional family relationship graph",
    add_completion=False,
)
console = Console()

_state: dict = {"db": None}

DATE_FORMATS = ["%Y-%m-%d"]


def get_config() -> KinshipConfig:
    """Load configuration from environment (and .env)."""
    from dotenv import load_dotenv

    load_dotenv()
    return KinshipConfig.from_env()


def _open_graph():
    from typing import get_args

    from .logging import LogLevel, configure_logging
    from .service import KinshipGraph

    config = get_config()
    configure_logging(config.log_level if config.log_level in get_args(LogLevel) else "INFO")
    return KinshipGraph.open(_state["db"] or config.db_path, config=config)


def _as_date(value: datetime | None) -> date | None:
    return value.date() if value else None


def _fail(error: Exception) -> None:
    console.print(f"[red]Error: {error}[/red]")
    raise typer.Exit(1)


def _name(graph, person_id: str | None) -> str:
    if person_id is None:
        return "-"
    return graph.directory.display_name(person_id)


@app.callback()
def main(
    db: Path = typer.Option(None, "--db", help="SQLite database (defaults to KINSHIP_DB_PATH)"),
):
    """Kinship graph commands."""
    _state["db"] = db


@app.command("add-person")
def add_person(
    first_name: str = typer.Option(None, "--first", help="First name"),
    last_name: str = typer.Option(None, "--last", help="Last name"),
    email: str = typer.Option(None, "--email", help="Email address"),
    birthday: datetime = typer.Option(None, "--born", formats=DATE_FORMATS, help="Birth date"),
    died: datetime = typer.Option(None, "--died", formats=DATE_FORMATS, help="Death date"),
):
    """Add a person to the directory."""
    graph = _open_graph()
    try:
        person = graph.people.add_person(
            first_name=first_name,
            last_name=last_name,
            email=email,
            birthday=_as_date(birthday),
            date_died=_as_date(died),
        )
        console.print(f"[green]Added {person.display_name}[/green] [dim]{person.person_id}[/dim]")
    finally:
        graph.close()


@app.command("people")
def list_people(
    limit: int = typer.Option(50, "--limit", "-l", help="Maximum results"),
):
    """List people in the directory."""
    graph = _open_graph()
    try:
        table = Table(title="People")
        table.add_column("ID", style="dim")
        table.add_column("Name")
        table.add_column("Born")
        table.add_column("Age")

        for person in graph.people.list_people(limit=limit):
            age = person.age()
            table.add_row(
                person.person_id,
                person.display_name,
                person.birthday.isoformat() if person.birthday else "",
                "" if age is None else str(age),
            )
        console.print(table)
    finally:
        graph.close()


@app.command()
def relate(
    subject: str = typer.Argument(..., help="Person declaring the relationship"),
    obj: str = typer.Argument(..., metavar="OBJECT", help="The relative"),
    relationship_type: str = typer.Argument(..., metavar="TYPE", help="e.g. parent, spouse, sibling"),
    start: datetime = typer.Option(None, "--start", formats=DATE_FORMATS, help="Start date"),
    end: datetime = typer.Option(None, "--end", formats=DATE_FORMATS, help="End date"),
    notes: str = typer.Option(None, "--notes", help="Free-text notes"),
    initiator: str = typer.Option(None, "--initiator", help="Requesting person (defaults to SUBJECT)"),
):
    """Request a relationship (OBJECT is SUBJECT's TYPE)."""
    graph = _open_graph()
    try:
        edge = graph.create_edge(
            subject,
            obj,
            relationship_type,
            start_date=_as_date(start),
            end_date=_as_date(end),
            notes=notes,
            initiator_id=initiator,
        )
        console.print(
            f"[green]Requested: {_name(graph, obj)} is {_name(graph, subject)}'s "
            f"{edge.relationship_type.label}[/green] [dim]{edge.edge_id}[/dim]"
        )
    except KinshipError as e:
        _fail(e)
    finally:
        graph.close()


@app.command()
def approve(
    edge_id: str = typer.Argument(..., help="Edge to approve"),
    acting: str = typer.Option(..., "--as", help="Person answering the request"),
):
    """Approve a pending relationship request."""
    graph = _open_graph()
    try:
        graph.approve(edge_id, acting)
        console.print("[green]Relationship request approved![/green]")
    except KinshipError as e:
        _fail(e)
    finally:
        graph.close()


@app.command()
def reject(
    edge_id: str = typer.Argument(..., help="Edge to reject"),
    acting: str = typer.Option(..., "--as", help="Person answering the request"),
):
    """Reject a pending relationship request."""
    graph = _open_graph()
    try:
        graph.reject(edge_id, acting)
        console.print("[yellow]Relationship request rejected.[/yellow]")
    except KinshipError as e:
        _fail(e)
    finally:
        graph.close()


@app.command()
def unrelate(
    edge_id: str = typer.Argument(..., help="Edge to delete"),
    acting: str = typer.Option(..., "--as", help="Subject or object of the edge"),
):
    """Delete a relationship and its mirror."""
    graph = _open_graph()
    try:
        if graph.delete_edge(edge_id, acting):
            console.print("[green]Relationship deleted.[/green]")
        else:
            console.print("[yellow]Relationship already gone.[/yellow]")
    except KinshipError as e:
        _fail(e)
    finally:
        graph.close()


def _edge_table(graph, title: str, edges) -> Table:
    table = Table(title=title)
    table.add_column("Edge", style="dim")
    table.add_column("Person")
    table.add_column("Relative")
    table.add_column("Type")
    table.add_column("Status")

    for edge in edges:
        table.add_row(
            edge.edge_id,
            _name(graph, edge.subject_id),
            _name(graph, edge.object_id),
            edge.relationship_type.label,
            edge.status.value,
        )
    return table


@app.command()
def pending(
    person: str = typer.Argument(..., help="Person whose requests to show"),
):
    """Show incoming and sent pending requests."""
    graph = _open_graph()
    try:
        console.print(_edge_table(graph, "Waiting for your answer", graph.pending_requests(person)))
        console.print(_edge_table(graph, "Sent, awaiting approval", graph.sent_requests(person)))
    finally:
        graph.close()


@app.command()
def edges(
    person: str = typer.Argument(..., help="Person whose edges to show"),
):
    """List every edge involving a person, any status."""
    graph = _open_graph()
    try:
        console.print(_edge_table(graph, "Relationships", graph.family.all_edges_involving(person)))
    finally:
        graph.close()


@app.command()
def family(
    person: str = typer.Argument(..., help="Focal person"),
):
    """Show immediate and extended family."""
    graph = _open_graph()
    try:
        overview = graph.family.family_overview(person)

        def names(ids: list[str]) -> str:
            return ", ".join(_name(graph, i) for i in ids) or "-"

        table = Table(title=f"Family of {_name(graph, person)}")
        table.add_column("Relation")
        table.add_column("People")
        table.add_row("Spouse", _name(graph, overview.spouse))
        table.add_row("Parents", names(overview.parents))
        table.add_row("Siblings", names(overview.siblings))
        table.add_row("Children", names(overview.children))
        console.print(table)

        if overview.extended:
            console.print(Panel(names(overview.extended), title="[bold]Extended Family[/bold]"))
        console.print(f"[dim]{overview.family_size} people in this family[/dim]")
    finally:
        graph.close()


def _lineage(person: str, generations: int | None, upward: bool) -> None:
    graph = _open_graph()
    try:
        walk = graph.family.ancestors if upward else graph.family.descendants
        found = walk(person, generations=generations)
        if not found:
            console.print(f"[yellow]No {'ancestors' if upward else 'descendants'} found[/yellow]")
            return
        for person_id in found:
            console.print(f"  • {_name(graph, person_id)} [dim]{person_id}[/dim]")
    except ValueError as e:
        _fail(e)
    finally:
        graph.close()


@app.command()
def ancestors(
    person: str = typer.Argument(..., help="Focal person"),
    generations: int = typer.Option(None, "--generations", "-g", help="Levels to walk (default: all)"),
):
    """List ancestors."""
    _lineage(person, generations, upward=True)


@app.command()
def descendants(
    person: str = typer.Argument(..., help="Focal person"),
    generations: int = typer.Option(None, "--generations", "-g", help="Levels to walk (default: all)"),
):
    """List descendants."""
    _lineage(person, generations, upward=False)


if __name__ == "__main__":
    app()
