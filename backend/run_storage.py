#!/usr/bin/env python3
"""
Maintenance tool for the local user store.

Inspects the durable key-value store, migrates legacy global keys into a
user's namespace and clears namespaces.

Usage:
    uv run python run_storage.py --status                 # Show namespaces and global keys
    uv run python run_storage.py --user ID --migrate      # Fold global keys into a user
    uv run python run_storage.py --user ID --clear        # Remove all of a user's data
    uv run python run_storage.py --clear-global           # Remove legacy global keys

Configuration:
    Set LOCAL_STORE_PATH in your .env file, or pass --store PATH.
"""

import argparse
import sys
from collections import Counter

from rich.console import Console
from rich.table import Table

from shared.config import get_settings
from shared.kv_store import FileKeyValueStore, IKeyValueStore
from shared.log import configure_logging
from modules.auth.models import DEMO_FLAG_KEY, DEMO_SESSION_KEY
from modules.storage.models import LEGACY_GLOBAL_KEYS, USER_KEY_PREFIX
from modules.storage.service import UserStorage

console = Console()


def open_store(path: str) -> IKeyValueStore:
    """Open the file-backed store, exiting when no path is configured."""
    if not path:
        console.print("[red]Error:[/red] LOCAL_STORE_PATH is not set.")
        console.print()
        console.print("Set it in your .env file or pass --store PATH.")
        sys.exit(1)
    return FileKeyValueStore(path)


def user_namespaces(kv: IKeyValueStore) -> Counter:
    """Count keys per user id, read from the physical key layout."""
    counts: Counter = Counter()
    for key in kv.keys():
        if not key.startswith(USER_KEY_PREFIX):
            continue
        user_id, sep, _ = key[len(USER_KEY_PREFIX):].rpartition("_")
        if sep and user_id:
            counts[user_id] += 1
    return counts


def show_status(storage: UserStorage):
    """Show per-user namespaces, legacy global keys and the demo flag."""
    kv = storage.kv

    table = Table(title="User Namespaces")
    table.add_column("User ID", style="cyan")
    table.add_column("Keys", justify="right")
    table.add_column("Logical keys")

    namespaces = user_namespaces(kv)
    for user_id, count in sorted(namespaces.items()):
        table.add_row(user_id, str(count), ", ".join(storage.list_user_keys(user_id)))

    if namespaces:
        console.print(table)
    else:
        console.print("[dim]No user namespaces found.[/dim]")

    console.print()
    present = [k for k in LEGACY_GLOBAL_KEYS if kv.get_item(k) is not None]
    if present:
        console.print(f"[yellow]Legacy global keys:[/yellow] {', '.join(present)}")
    else:
        console.print("[green]No legacy global keys.[/green]")

    if kv.get_item(DEMO_FLAG_KEY) == "true":
        console.print(f"[blue]Demo mode is on[/blue] ({DEMO_SESSION_KEY} present: "
                      f"{kv.get_item(DEMO_SESSION_KEY) is not None})")


def migrate_user(storage: UserStorage, user_id: str):
    """Fold legacy global keys into a user's namespace."""
    report = storage.migrate_global_to_user(user_id)

    if not report.migrated and not report.skipped:
        console.print("[green]Nothing to migrate.[/green]")
        return

    for key in report.migrated:
        console.print(f"[green]✓[/green] {key} migrated to {user_id}")
    for key in report.skipped:
        console.print(f"[yellow]![/yellow] {key} skipped (unreadable)")


def clear_user(storage: UserStorage, user_id: str):
    """Remove every key in a user's namespace after confirmation."""
    keys = storage.list_user_keys(user_id)
    if not keys:
        console.print(f"[dim]No data stored for {user_id}.[/dim]")
        return

    console.print(f"[yellow]Warning:[/yellow] This removes {len(keys)} key(s) for {user_id}:")
    for key in keys:
        console.print(f"  - {key}")

    response = input("Continue? [y/N] ")
    if response.lower() != "y":
        console.print("Aborted.")
        return

    removed = storage.clear_all_for_user(user_id)
    console.print(f"[green]✓[/green] Removed {removed} key(s)")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Inspect and maintain the local user store",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  uv run python run_storage.py --status                Show store status
  uv run python run_storage.py --user abc --migrate    Migrate global keys to user abc
  uv run python run_storage.py --user abc --clear      Clear user abc
  uv run python run_storage.py --clear-global          Remove legacy global keys
        """
    )
    parser.add_argument("--store", metavar="PATH", help="Store file (defaults to LOCAL_STORE_PATH)")
    parser.add_argument("--user", metavar="ID", help="User ID for --migrate/--clear")
    parser.add_argument("--status", action="store_true", help="Show store status")
    parser.add_argument("--migrate", action="store_true", help="Migrate legacy global keys to --user")
    parser.add_argument("--clear", action="store_true", help="Remove all data for --user")
    parser.add_argument("--clear-global", action="store_true", help="Remove legacy global keys")

    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level)

    if (args.migrate or args.clear) and not args.user:
        parser.error("--migrate and --clear require --user")

    console.print(f"[bold]{settings.app_name} Local Store[/bold]")
    console.print()

    storage = UserStorage(open_store(args.store or settings.local_store_path))

    if args.migrate:
        migrate_user(storage, args.user)
    elif args.clear:
        clear_user(storage, args.user)
    elif args.clear_global:
        removed = storage.clear_global_keys()
        console.print(f"[green]✓[/green] Removed {removed} global key(s)")
    else:
        show_status(storage)


if __name__ == "__main__":
    main()
