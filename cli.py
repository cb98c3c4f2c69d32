# cli.py
import os
import sys
from datetime import datetime
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import IntPrompt, Confirm
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich import box

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle

from sdk.catalog_client import CatalogClient

console = Console()
c = CatalogClient(base_url=os.environ.get("CATALOG_URL", "http://127.0.0.1:8085"))


# Global state for status messages and caching
status_message = "Ready"
category_cache: List[str] = []
id_cache: List[str] = []

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})


# ---------------------------
# Display helpers
# ---------------------------
def show_products(products: List[Dict[str, Any]], title: str = "📦 Products"):
    if not products:
        console.print("[italic yellow]No products found[/italic yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True
    )
    table.add_column("ID", style="dim", justify="right", width=8)
    table.add_column("Category", width=20)
    table.add_column("Name", style="bold", width=30)

    for p in products:
        table.add_row(str(p.get("id", "N/A")), p.get("category", "N/A"), p.get("name", "N/A"))
    console.print(table)


def show_page(page: Dict[str, Any], title: str):
    show_products(page.get("items", []), title=title)
    total_pages = page.get("total_pages", 0)
    shown = page.get("page_number", 0) + 1 if total_pages else 0
    console.print(
        f"[dim]page {shown}/{total_pages} · "
        f"{page.get('total_elements', 0)} products · size {page.get('page_size', '-')}[/dim]"
    )


def show_categories(categories: List[str]):
    if not categories:
        console.print("[italic yellow]No categories yet[/italic yellow]")
        return
    table = Table(title="🏷️ Categories", box=box.ROUNDED, header_style="bold yellow")
    table.add_column("#", justify="right", width=4)
    table.add_column("Category", width=30)
    for i, name in enumerate(categories, 1):
        table.add_row(str(i), name)
    console.print(table)


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


# ---------------------------
# API wrapper
# ---------------------------
def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Calls fn(*args, **kwargs) behind a spinner.
    Errors are reported in the status panel and None is returned.
    """
    global status_message
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
        ) as progress:
            progress.add_task(description="Processing...", total=None)
            result = fn(*args, **kwargs)

        if success_msg:
            status_message = success_msg
            console.print(show_status(success_msg, True))
        return result
    except Exception as e:
        status_message = f"Error: {e}"
        console.print(show_status(status_message, False))
        return None


# ---------------------------
# Autocompletion helpers
# ---------------------------
def refresh_caches():
    global category_cache, id_cache
    category_cache = try_api(c.list_categories) or []
    # server default page size; always within its max_page_size
    first = try_api(c.list_products, 0) or {}
    id_cache = [str(p["id"]) for p in first.get("items", [])]


def category_completer():
    return WordCompleter(category_cache, ignore_case=True)


def id_completer():
    return WordCompleter(id_cache)


def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


def ask_id(message: str = "Enter product ID") -> Optional[int]:
    raw = prompt_with_autocomplete(message, completer=id_completer()).strip()
    try:
        return int(raw)
    except ValueError:
        console.print("[red]Product IDs are whole numbers.[/red]")
        return None


def create_header():
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    header.add_row(
        "🗂️ Catalog SDK",
        "[bold blue]Product Catalog CLI[/bold blue]",
        f"[dim]{now}[/dim]"
    )
    return Panel(header, style="bold blue")


# ---------------------------
# Paging
# ---------------------------
def browse(fetch, title: str):
    page = 0
    size = IntPrompt.ask("Page size", default=10)
    while True:
        body = try_api(fetch, page, size)
        if body is None:
            return
        show_page(body, title)
        total = body.get("total_pages", 0)
        moves = []
        if page + 1 < total:
            moves.append("n")
        if page > 0:
            moves.append("p")
        if not moves:
            return
        choice = prompt_with_autocomplete(
            f"[{'/'.join(moves)}] next/prev, anything else to stop",
            completer=WordCompleter(moves),
        ).strip().lower()
        if choice == "n" and "n" in moves:
            page += 1
        elif choice == "p" and "p" in moves:
            page -= 1
        else:
            return


# ---------------------------
# Main menu
# ---------------------------
def menu():
    global status_message, category_cache, id_cache

    console.clear()
    console.print(create_header())
    refresh_caches()

    while True:
        if status_message:
            console.print(show_status(status_message, "Error" not in status_message))

        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)

        options = [
            ("1", "🏷️ List categories", "5", "➕ Create product"),
            ("2", "📂 Browse a category", "6", "✏️ Update product"),
            ("3", "📦 Browse all products", "7", "🗑️ Delete product"),
            ("4", "ℹ️ Get product by ID", "8", "🔄 Reset catalog"),
            ("", "", "q", "👋 Quit")
        ]
        for row in options:
            menu_table.add_row(*row)

        console.print(Panel(menu_table, title="📋 Menu", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter([str(i) for i in range(1, 9)] + ["q", "quit", "exit"])
        ).strip()

        if choice == "1":
            categories = try_api(c.list_categories, success_msg="Categories loaded")
            if categories is not None:
                category_cache = categories
                show_categories(categories)

        elif choice == "2":
            category = prompt_with_autocomplete("Category", completer=category_completer()).strip()
            browse(lambda page, size: c.list_by_category(category, page, size), f"📂 {category}")

        elif choice == "3":
            browse(c.list_products, "📦 All products")

        elif choice == "4":
            pid = ask_id()
            if pid is not None:
                resp = try_api(c.get_product, pid, success_msg=f"Product {pid} loaded")
                if resp:
                    show_products([resp])

        elif choice == "5":
            category = prompt_with_autocomplete("🏷️ Category", completer=category_completer()).strip()
            name = prompt_with_autocomplete("Product name").strip()
            resp = try_api(c.create_product, category, name, success_msg=f"Product '{name}' created")
            if resp:
                show_products([resp])
                refresh_caches()

        elif choice == "6":
            pid = ask_id()
            if pid is not None:
                current = try_api(c.get_product, pid)
                if current:
                    category = prompt_with_autocomplete(
                        "🏷️ Category", completer=category_completer(), default=current["category"]
                    ).strip()
                    name = prompt_with_autocomplete("Product name", default=current["name"]).strip()
                    resp = try_api(c.update_product, pid, category, name, success_msg=f"Product {pid} updated")
                    if resp:
                        show_products([resp])
                        refresh_caches()

        elif choice == "7":
            pid = ask_id()
            if pid is not None and Confirm.ask(f"Delete product {pid}?"):
                try_api(c.delete_product, pid, success_msg=f"Product {pid} deleted")
                refresh_caches()

        elif choice == "8":
            if Confirm.ask("[red]This will delete every product. Continue?[/red]"):
                resp = try_api(c.reset, success_msg="Catalog reset")
                console.print(resp)
                category_cache = []
                id_cache = []

        elif choice.lower() in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                console.print(Panel.fit("[bold green]Bye! 👋[/bold green]", title="Goodbye"))
                sys.exit(0)

        console.print()
        console.rule(style="dim")


if __name__ == "__main__":
    try:
        menu()
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)
    except Exception as e:
        console.print(f"\n\n[bold red]Unexpected error: {e}[/bold red]")
        sys.exit(1)
