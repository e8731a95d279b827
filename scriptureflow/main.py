#!/usr/bin/env python3
"""
CLI interface for the ScriptureFlow offline reader.
"""

import argparse
import sys

from .config import load_settings
from .repository import ScriptureRepository, create_repository
from .search import highlight

HELP_TEXT = """Commands:
  <text>                   - search verses (all words must match)
  /books                   - list books
  /chapters <book>         - list chapters of a book
  /read <book> <chapter>   - print a chapter
  /votd                    - verse of the day
  /bookmark <verse_id>     - toggle a bookmark
  /bookmarks               - list bookmarks
  /highlight <verse_id>    - toggle a highlight
  /highlights              - list highlights
  /prefs                   - show reading preferences
  /quit                    - exit"""


def format_ref(verse) -> str:
    return f"{verse.ref.book} {verse.ref.chapter}:{verse.ref.verse}"


def print_search(repo: ScriptureRepository, query: str, limit: int) -> None:
    results = repo.search(query, limit=limit)
    if not results:
        print("No verses found.")
        return
    for r in results:
        print(f"{format_ref(r.verse)}  {highlight(r.verse.text, r.match_ranges)}")
    print(f"\n{len(results)} result(s)")


def split_book_args(args: str):
    """Split '<book> <chapter>' where the book name may contain spaces."""
    head, _, tail = args.rpartition(" ")
    if head and tail.isdigit():
        return head.strip(), int(tail)
    return args.strip(), None


def handle_command(repo: ScriptureRepository, user_input: str) -> bool:
    """Run a slash command. Returns False when the loop should stop."""
    cmd, _, args = user_input.partition(" ")
    cmd = cmd.lower()
    args = args.strip()

    if cmd in ["/quit", "/exit", "/q"]:
        print("Goodbye!")
        return False

    elif cmd == "/books":
        for book in repo.get_books():
            print(f"  {book}: {len(repo.get_chapters(book))} chapters")

    elif cmd == "/chapters":
        chapters = repo.get_chapters(args)
        if not chapters:
            print(f"Unknown book: {args}")
        else:
            print(", ".join(str(c) for c in chapters))

    elif cmd == "/read":
        book, chapter = split_book_args(args)
        verses = repo.get_verses(book, chapter) if chapter is not None else []
        if not verses:
            print(f"Nothing found for: {args}")
        for v in verses:
            print(f"{v.ref.verse:>3} {v.text}")

    elif cmd == "/votd":
        verse = repo.get_verse_of_the_day()
        print(f"{format_ref(verse)}\n{verse.text}")

    elif cmd == "/bookmark":
        if repo.is_bookmarked(args):
            repo.remove_bookmark(args)
            print(f"Removed bookmark {args}")
        elif repo.get_verse_by_id(args) is None:
            print(f"Unknown verse id: {args}")
        else:
            repo.add_bookmark(args)
            print(f"Bookmarked {args}")

    elif cmd == "/bookmarks":
        for b in repo.list_bookmarks():
            verse = repo.get_verse_by_id(b.verse_id)
            print(f"  {format_ref(verse) if verse else b.verse_id}")

    elif cmd == "/highlight":
        if repo.is_highlighted(args):
            repo.clear_highlight(args)
            print(f"Cleared highlight {args}")
        elif repo.get_verse_by_id(args) is None:
            print(f"Unknown verse id: {args}")
        else:
            repo.set_highlight(args)
            print(f"Highlighted {args}")

    elif cmd == "/highlights":
        for h in repo.list_highlights():
            verse = repo.get_verse_by_id(h.verse_id)
            print(f"  {format_ref(verse) if verse else h.verse_id}  #{h.color_argb:08X}")

    elif cmd == "/prefs":
        prefs = repo.reading_preferences()
        for key, value in vars(prefs).items():
            print(f"  {key}: {value}")

    elif cmd == "/help":
        print(HELP_TEXT)

    else:
        print(f"Unknown command: {user_input}")

    return True


def interactive_mode(repo: ScriptureRepository, limit: int):
    """Run interactive reading/search mode."""
    print("=" * 60)
    print("ScriptureFlow - offline scripture search")
    print("=" * 60)
    print()
    print(HELP_TEXT)
    print()

    while True:
        try:
            user_input = input("search> ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\nGoodbye!")
            break

        if not user_input:
            continue

        print()
        try:
            if user_input.startswith("/"):
                if not handle_command(repo, user_input):
                    break
            else:
                print_search(repo, user_input, limit)
        except Exception as e:
            print(f"Error: {e}")
        print()


def single_query_mode(repo: ScriptureRepository, query: str, limit: int):
    """Process a single query and exit."""
    try:
        print_search(repo, query, limit)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="ScriptureFlow offline scripture reader",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        "-q", "--query",
        type=str,
        help="Single query to process (non-interactive mode)"
    )
    parser.add_argument(
        "--asset",
        type=str,
        help="Path to the bible asset JSON"
    )
    parser.add_argument(
        "--db",
        type=str,
        help="Path to the bookmarks/highlights database"
    )
    parser.add_argument(
        "--limit",
        type=int,
        help="Maximum number of search results (default: 200)"
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        help="Directory for search logs"
    )

    args = parser.parse_args()

    settings = load_settings(
        asset_path=args.asset,
        db_path=args.db,
        search_limit=args.limit,
        log_dir=args.log_dir,
    )

    if not settings.asset_path.exists():
        print(f"Bible asset not found at {settings.asset_path}", file=sys.stderr)
        sys.exit(1)

    try:
        repo = create_repository(settings)
        repo.ensure_verses_loaded()
    except Exception as e:
        print(f"Error loading verses: {e}", file=sys.stderr)
        sys.exit(1)

    if args.query:
        single_query_mode(repo, args.query, settings.search_limit)
    else:
        interactive_mode(repo, settings.search_limit)


if __name__ == "__main__":
    main()
