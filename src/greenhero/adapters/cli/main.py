"""
adapters.cli.main - Terminal adapter for the GreenHero client.

Every command builds the ServiceFactory, bootstraps the stored session and
asks the navigation gate whether its group (auth or main) may run, the
same decision the app makes before showing a screen.

Commands
--------
  signup            Create a new account (then log in)
  login             Sign in and store credentials (~/.greenhero/credentials.json)
  logout            Clear stored credentials
  whoami            Show the currently logged-in user
  forgot-password   Request a password reset e-mail
  products ...      list / show / add marketplace listings
  chats ...         list / new / delete stored chat sessions
  ask               One-shot question to the eco assistant
  chat              Interactive assistant session
  classify          Classify a photo of a waste item
  profile ...       show / update your profile

Usage
-----
  greenhero login
  greenhero products list --category solar-energy
  greenhero classify ./bottle.jpg
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, List, Optional

import typer
from rich import box
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from greenhero import __version__
from greenhero.application.dto import MARKETPLACE_CATEGORIES
from greenhero.application.navigation import RouteGroup, decide_route
from greenhero.application.services.marketplace import ALL_CATEGORIES, MarketplaceService
from greenhero.domain.exceptions import DomainError
from greenhero.domain.models import Notice, Route
from greenhero.factory import ServiceFactory
from greenhero.infrastructure.config import Settings

console = Console()
app = typer.Typer(
    help="GreenHero CLI",
    add_completion=False,
    no_args_is_help=True,
)
products_app = typer.Typer(help="Marketplace listings.", no_args_is_help=True)
chats_app = typer.Typer(help="Stored assistant chat sessions.", no_args_is_help=True)
profile_app = typer.Typer(help="Your profile.", no_args_is_help=True)
app.add_typer(products_app, name="products")
app.add_typer(chats_app, name="chats")
app.add_typer(profile_app, name="profile")


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _make_factory() -> ServiceFactory:
    return ServiceFactory(Settings.from_env())


async def _open(group: RouteGroup) -> ServiceFactory:
    """Bootstrap the session and apply the navigation gate for ``group``."""
    factory = _make_factory()
    snapshot = await factory.session.bootstrap()
    route = decide_route(snapshot, group)
    if route == Route.LOGIN:
        factory.close()
        console.print(
            "[bold red]Not logged in.[/bold red] "
            "Run [bold]login[/bold] (or [bold]signup[/bold]) first."
        )
        raise typer.Exit(code=1)
    if route == Route.HOME:
        factory.close()
        label = snapshot.user.display_name if snapshot.user else "current user"
        console.print(
            f"Already logged in as [bold]{label}[/bold]. "
            "Run [bold]logout[/bold] first."
        )
        raise typer.Exit(code=0)
    return factory


def _run(main: Callable[[], Awaitable[None]]) -> None:
    """Run an async command body; domain errors become a red line and exit 1."""
    try:
        asyncio.run(main())
    except DomainError as exc:
        console.print(f"[bold red]{exc.title}:[/bold red] {exc}")
        raise typer.Exit(code=1)


def _show_notice(notice: Notice) -> None:
    console.print(Panel(
        f"[bold green]{notice.title}[/bold green]\n{notice.message}",
        border_style="green",
    ))


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"greenhero v{__version__}")
        raise typer.Exit()


# ---------------------------------------------------------------------------
# Commands: Auth
# ---------------------------------------------------------------------------

@app.command()
def signup() -> None:
    """Create a new account."""
    console.print(Panel("[bold]Create Account[/bold]", border_style="blue"))

    form = {
        "first_name": Prompt.ask("[bold]First name[/bold]"),
        "last_name":  Prompt.ask("[bold]Last name[/bold]"),
        "email":      Prompt.ask("[bold]Email[/bold]"),
        "phone_number": Prompt.ask("[bold]Phone number[/bold]", default=""),
        "password":   Prompt.ask(
            "[bold]Password[/bold] (min 6 chars, one capital)", password=True,
        ),
        "confirm_password": Prompt.ask("[bold]Confirm password[/bold]", password=True),
    }

    async def _main() -> None:
        factory = await _open(RouteGroup.AUTH)
        try:
            notice = await factory.session.signup(form)
        finally:
            factory.close()
        _show_notice(notice)
        console.print("Run [bold]login[/bold] to sign in.")

    _run(_main)


@app.command()
def login(
    email: Optional[str] = typer.Option(None, "--email", "-e", help="Account e-mail."),
) -> None:
    """Sign in to your account."""
    email = email or Prompt.ask("[bold]Email[/bold]")
    if not email.strip():
        console.print("[bold red]Enter your email.[/bold red]")
        raise typer.Exit(code=1)
    password = Prompt.ask("[bold]Password[/bold]", password=True)

    async def _main() -> None:
        factory = await _open(RouteGroup.AUTH)
        try:
            notice = await factory.session.login(email.strip(), password)
            user = factory.session.user
        finally:
            factory.close()
        name = user.display_name if user else email
        console.print(Panel(
            f"[bold green]{notice.message}[/bold green] Logged in as [bold]{name}[/bold].\n"
            "Try [bold]products list[/bold], [bold]chat[/bold] or [bold]classify[/bold].",
            border_style="green",
        ))

    _run(_main)


@app.command()
def logout(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Sign out and clear stored credentials."""

    async def _main() -> None:
        factory = _make_factory()
        try:
            snapshot = await factory.session.bootstrap()
            if not snapshot.is_authenticated:
                console.print("[dim]Not currently logged in.[/dim]")
            label = snapshot.user.display_name if snapshot.user else "this device"
            if snapshot.is_authenticated and not (yes or Confirm.ask(f"Sign out [bold]{label}[/bold]?")):
                return
            # clears leftovers too when already logged out
            await factory.session.logout()
        finally:
            factory.close()
        if snapshot.is_authenticated:
            console.print("[green]Logged out.[/green]")

    _run(_main)


@app.command()
def whoami() -> None:
    """Show the currently logged-in user."""

    async def _main() -> None:
        factory = _make_factory()
        try:
            snapshot = await factory.session.bootstrap()
        finally:
            factory.close()
        if not snapshot.is_authenticated:
            console.print("[dim]Not logged in.[/dim]")
            return
        user = snapshot.user
        if user is None:
            console.print("Logged in ([dim]profile unavailable[/dim])")
            return
        console.print(f"Logged in as [bold]{user.display_name}[/bold] <{user.email}> (id={user.id})")

    _run(_main)


@app.command("forgot-password")
def forgot_password(
    email: Optional[str] = typer.Option(None, "--email", "-e", help="Account e-mail."),
) -> None:
    """Send a password reset link to your e-mail."""
    email = email or Prompt.ask("[bold]Email[/bold]")

    async def _main() -> None:
        factory = _make_factory()
        try:
            notice = await factory.session.forgot_password(email)
        finally:
            factory.close()
        _show_notice(notice)

    _run(_main)


# ---------------------------------------------------------------------------
# Commands: Marketplace
# ---------------------------------------------------------------------------

@products_app.command("list")
def products_list(
    category: str = typer.Option(
        ALL_CATEGORIES, "--category", "-c",
        help=f"One of: {ALL_CATEGORIES}, {', '.join(MARKETPLACE_CATEGORIES)}.",
    ),
    search: str = typer.Option("", "--search", "-s", help="Filter by name."),
) -> None:
    """List marketplace products."""

    async def _main() -> None:
        factory = await _open(RouteGroup.TABS)
        try:
            products = await factory.create_marketplace_service().list_products()
        finally:
            factory.close()

        shown = MarketplaceService.filter_products(products, category, search)
        if not shown:
            console.print("[yellow]No products found.[/yellow]")
            return
        t = Table(box=box.SIMPLE)
        t.add_column("ID", style="dim")
        t.add_column("Name", style="bold")
        t.add_column("Category")
        t.add_column("Price", justify="right")
        t.add_column("Stock", justify="right")
        for p in shown:
            t.add_row(p.id, p.name, p.category, f"dzd {p.price:.2f}", f"{p.stock_quantity} {p.unit}")
        console.print(t)

    _run(_main)


@products_app.command("show")
def products_show(product_id: str = typer.Argument(..., help="Product id.")) -> None:
    """Show one product."""

    async def _main() -> None:
        factory = await _open(RouteGroup.TABS)
        try:
            p = await factory.create_marketplace_service().get_product(product_id)
        finally:
            factory.close()

        t = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
        t.add_column("Field", style="bold")
        t.add_column("Value")
        t.add_row("Price", f"dzd {p.price:.2f} / {p.unit or 'unit'}")
        t.add_row("Category", p.category or "[dim]—[/dim]")
        t.add_row("Stock", str(p.stock_quantity))
        if p.seller_name:
            t.add_row("Seller", p.seller_name)
        if p.description:
            t.add_row("Description", p.description)
        for url in p.product_images:
            t.add_row("Image", url)
        console.print(Panel(t, title=p.name, border_style="blue"))

    _run(_main)


@products_app.command("add")
def products_add(
    images: List[Path] = typer.Argument(..., help="One or more product photos."),
    name: str = typer.Option(..., "--name", help="Product name."),
    price: float = typer.Option(..., "--price", help="Unit price."),
    category: str = typer.Option(..., "--category", help="Product category."),
    unit: str = typer.Option(..., "--unit", help="Sale unit, e.g. kg."),
    stock: int = typer.Option(0, "--stock", help="Quantity in stock."),
    description: str = typer.Option("", "--description", help="Free text."),
) -> None:
    """Publish a new product with photos."""
    draft = {
        "name": name,
        "description": description,
        "price": price,
        "category": category,
        "stock_quantity": stock,
        "unit": unit,
    }

    async def _main() -> None:
        factory = await _open(RouteGroup.TABS)
        try:
            notice = await factory.create_marketplace_service().create_product(draft, images)
        finally:
            factory.close()
        _show_notice(notice)

    _run(_main)


# ---------------------------------------------------------------------------
# Commands: Chat
# ---------------------------------------------------------------------------

@chats_app.command("list")
def chats_list() -> None:
    """List your chat sessions."""

    async def _main() -> None:
        factory = await _open(RouteGroup.TABS)
        try:
            sessions = await factory.create_chat_service().list_sessions()
        finally:
            factory.close()
        if not sessions:
            console.print("[dim]No chats yet. Start one with [bold]chats new[/bold].[/dim]")
            return
        t = Table(box=box.SIMPLE)
        t.add_column("ID", style="dim")
        t.add_column("Title", style="bold")
        for s in sessions:
            t.add_row(s.id, s.display_title)
        console.print(t)

    _run(_main)


@chats_app.command("new")
def chats_new(message: str = typer.Argument(..., help="First message.")) -> None:
    """Start a chat session and get the first answer."""

    async def _main() -> None:
        factory = await _open(RouteGroup.TABS)
        try:
            chat = factory.create_chat_service()
            created = await chat.create_session(message)
            with console.status("[bold cyan]Thinking…", spinner="dots"):
                reply = await chat.send_message(message)
        finally:
            factory.close()
        console.print(f"[dim]Session {created.id}[/dim] [bold]{created.display_title}[/bold]")
        console.print(Panel(Markdown(reply.text), title="EcoAI", border_style="green"))

    _run(_main)


@chats_app.command("delete")
def chats_delete(
    session_id: str = typer.Argument(..., help="Chat session id."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Delete a chat session."""
    if not yes and not Confirm.ask("Delete this chat session?"):
        return

    async def _main() -> None:
        factory = await _open(RouteGroup.TABS)
        try:
            notice = await factory.create_chat_service().delete_session(session_id)
        finally:
            factory.close()
        console.print(f"[green]{notice.message}[/green]")

    _run(_main)


@app.command()
def ask(message: str = typer.Argument(..., help="Your question.")) -> None:
    """Ask the eco assistant a one-shot question."""

    async def _main() -> None:
        factory = await _open(RouteGroup.TABS)
        try:
            with console.status("[bold cyan]Thinking…", spinner="dots"):
                reply = await factory.create_chat_service().send_message(message)
        finally:
            factory.close()
        style = "green" if reply.ok else "yellow"
        console.print(Panel(Markdown(reply.text), title="EcoAI", border_style=style))

    _run(_main)


@app.command()
def chat() -> None:
    """Start an interactive assistant session."""

    async def _main() -> None:
        factory = await _open(RouteGroup.TABS)
        try:
            service = factory.create_chat_service()
            console.print(Panel(
                "[bold]EcoAI Chat[/bold]\n"
                "Type your question, or [bold]exit[/bold] / [bold]quit[/bold] to stop.",
                border_style="cyan",
            ))
            while True:
                try:
                    user_input = Prompt.ask("\n[bold cyan]You[/bold cyan]")
                except (KeyboardInterrupt, EOFError):
                    console.print("\n[dim]Goodbye![/dim]")
                    break

                if user_input.strip().lower() in ("exit", "quit", "q", "bye"):
                    console.print("[dim]Goodbye![/dim]")
                    break

                if not user_input.strip():
                    continue

                with console.status("[bold cyan]Thinking…", spinner="dots"):
                    reply = await service.send_message(user_input)
                console.print()
                console.print(Panel(Markdown(reply.text), title="EcoAI", border_style="green"))
        finally:
            factory.close()

    _run(_main)


# ---------------------------------------------------------------------------
# Commands: Waste classifier
# ---------------------------------------------------------------------------

@app.command()
def classify(image: Path = typer.Argument(..., help="Photo of the item.")) -> None:
    """Identify a waste item and get reuse/recycling advice."""

    async def _main() -> None:
        factory = await _open(RouteGroup.TABS)
        try:
            with console.status("[bold cyan]Analyzing…", spinner="dots"):
                result = await factory.create_waste_classifier().classify(image)
        finally:
            factory.close()

        console.print(Panel(f"[bold]{result.label}[/bold]", title="Item", border_style="blue"))
        if result.suggestions:
            console.print(Panel(
                Markdown("\n\n".join(result.suggestions)),
                title="Reuse", border_style="green",
            ))
        console.print(Panel(
            "\n".join(f"• {step}" for step in result.recycle_steps)
            + f"\n[dim]{result.location}[/dim]",
            title="Recycle", border_style="yellow",
        ))

    _run(_main)


# ---------------------------------------------------------------------------
# Commands: Profile
# ---------------------------------------------------------------------------

@profile_app.command("show")
def profile_show() -> None:
    """Show your profile."""

    async def _main() -> None:
        factory = await _open(RouteGroup.TABS)
        try:
            fields = factory.create_profile_service().current_form()
        finally:
            factory.close()
        t = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
        t.add_column("Field", style="bold")
        t.add_column("Value")
        for name, value in fields.items():
            t.add_row(name.replace("_", " ").capitalize(), value or "[dim]—[/dim]")
        console.print(Panel(t, title="Your Profile", border_style="blue"))

    _run(_main)


@profile_app.command("update")
def profile_update(
    first_name: Optional[str] = typer.Option(None, "--first-name"),
    last_name: Optional[str] = typer.Option(None, "--last-name"),
    email: Optional[str] = typer.Option(None, "--email"),
    phone_number: Optional[str] = typer.Option(None, "--phone"),
    bio: Optional[str] = typer.Option(None, "--bio"),
    location: Optional[str] = typer.Option(None, "--location"),
    profile_image_url: Optional[str] = typer.Option(None, "--avatar-url"),
    profile_background_image_url: Optional[str] = typer.Option(None, "--cover-url"),
) -> None:
    """Change profile fields; omitted options keep their current value."""
    edits = {
        k: v for k, v in {
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "phone_number": phone_number,
            "bio": bio,
            "location": location,
            "profile_image_url": profile_image_url,
            "profile_background_image_url": profile_background_image_url,
        }.items() if v is not None
    }

    async def _main() -> None:
        factory = await _open(RouteGroup.TABS)
        try:
            service = factory.create_profile_service()
            form = {**service.current_form(), **edits}
            user = await service.update_profile(form)
        finally:
            factory.close()
        console.print(f"[green]Profile updated successfully.[/green] ({user.display_name})")

    _run(_main)


# ---------------------------------------------------------------------------
# Global options
# ---------------------------------------------------------------------------

@app.callback()
def _callback(
    version: bool = typer.Option(
        False, "--version", "-v",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log requests to stderr."),
) -> None:
    """GreenHero CLI"""
    level = "INFO" if verbose else Settings.from_env().log_level
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    app()
