import argparse
import asyncio
import logging
import sys
from pathlib import Path

from tqdm import tqdm

from snippet_manager.auth import AuthProvider, AuthSession, Identity
from snippet_manager.config import MODE_LOCAL, MODE_REMOTE, AppSettings
from snippet_manager.errors import SnippetError
from snippet_manager.exception_handler import configure_logging
from snippet_manager.snippet import EXPORT_FILENAME, Language, Snippet
from snippet_manager.store import create_store
from snippet_manager.viewmodel import SnippetViewModel


logger = logging.getLogger("snippet_manager")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Store, search and share code snippets"
    )
    parser.add_argument(
        "--mode",
        choices=(MODE_LOCAL, MODE_REMOTE),
        help="Storage mode (defaults to SNIPPETS_MODE or local)",
    )
    parser.add_argument(
        "--user",
        help="Signed-in user id (required for remote mode)",
    )
    parser.add_argument(
        "--provider",
        choices=[provider.value for provider in AuthProvider],
        default=AuthProvider.GOOGLE.value,
        help="Identity provider the user signed in with (default: google)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (defaults to LOG_LEVEL or INFO)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    list_cmd = commands.add_parser("list", help="List snippets")
    list_cmd.add_argument(
        "--search",
        "-s",
        default="",
        help="Only show snippets whose title, description or tags contain this text",
    )

    add_cmd = commands.add_parser("add", help="Add a snippet")
    add_cmd.add_argument("--title", "-t", required=True, help="Snippet title")
    add_cmd.add_argument("--description", "-d", default="", help="Snippet description")
    add_cmd.add_argument("--tags", default="", help="Comma-separated tags")
    add_cmd.add_argument(
        "--language",
        "-l",
        choices=[language.value for language in Language],
        default=Language.JAVASCRIPT.value,
        help="Snippet language (default: javascript)",
    )
    code_group = add_cmd.add_mutually_exclusive_group(required=True)
    code_group.add_argument("--code", "-c", help="Code text")
    code_group.add_argument(
        "--code-file",
        type=Path,
        help="Read the code from this file ('-' for stdin)",
    )

    delete_cmd = commands.add_parser("delete", help="Delete a snippet")
    delete_cmd.add_argument("snippet_id", help="Id of the snippet to delete")
    delete_cmd.add_argument(
        "--yes",
        "-y",
        action="store_true",
        help="Do not ask for confirmation",
    )

    export_cmd = commands.add_parser("export", help="Export all snippets as JSON")
    export_cmd.add_argument(
        "--output",
        "-o",
        nargs="?",
        const=EXPORT_FILENAME,
        help=f"Write to this file (default name: {EXPORT_FILENAME}); prints to stdout if omitted",
    )

    import_cmd = commands.add_parser("import", help="Import snippets from a JSON file")
    import_cmd.add_argument("path", type=Path, help="JSON file containing an array of snippets")

    return parser


def _alert(message: str) -> None:
    tqdm.write(f"⚠️  {message}", file=sys.stderr)


def _ask(prompt: str) -> bool:
    try:
        answer = input(f"{prompt} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def _print_snippet(snippet: Snippet) -> None:
    created = snippet.created.strftime("%Y-%m-%d")
    print(f"[{snippet.id}] {snippet.title} ({snippet.language}) - Created: {created}")
    if snippet.description:
        print(f"    {snippet.description}")
    if snippet.tags:
        print("    tags: " + ", ".join(snippet.tags))
    for line in snippet.code.splitlines():
        print(f"    | {line}")
    print()


def _read_code(args: argparse.Namespace) -> str:
    if args.code is not None:
        return args.code
    if str(args.code_file) == "-":
        return sys.stdin.read()
    return args.code_file.read_text(encoding="utf-8")


async def run(args: argparse.Namespace, settings: AppSettings) -> int:
    store = create_store(settings)
    identity = None
    if args.user:
        identity = Identity(uid=args.user, provider=AuthProvider(args.provider))
    view_model = SnippetViewModel(
        store,
        auth=AuthSession(identity),
        notify=_alert,
        confirm=_ask,
    )

    try:
        await view_model.start()

        if args.command == "list":
            snippets = view_model.set_search(args.search)
            if not snippets:
                print("No snippets found")
            for snippet in snippets:
                _print_snippet(snippet)

        elif args.command == "add":
            view_model.open_form()
            view_model.update_draft(
                title=args.title,
                description=args.description,
                code=_read_code(args),
                tags=args.tags,
                language=Language(args.language),
            )
            snippet = await view_model.add()
            tqdm.write(f"✅ Saved snippet {snippet.id}")

        elif args.command == "delete":
            if await view_model.delete(args.snippet_id, confirmed=args.yes):
                tqdm.write(f"✅ Deleted snippet {args.snippet_id}")

        elif args.command == "export":
            payload = view_model.export()
            if payload is None:
                return 0
            if args.output:
                Path(args.output).write_bytes(payload)
                tqdm.write(f"✅ Exported {len(view_model.snippets)} snippets to: {args.output}")
            else:
                print(payload.decode("utf-8"))

        elif args.command == "import":
            data = args.path.read_bytes()
            with tqdm(desc="Importing", unit="snippet") as progress_bar:

                def _progress(done: int, total: int) -> None:
                    progress_bar.total = total
                    progress_bar.update(done - progress_bar.n)

                result = await view_model.import_snippets(data, progress=_progress)
            tqdm.write(f"✅ Imported {result.imported} snippets")
            if result.skipped:
                tqdm.write(f"⚠️  Skipped {result.skipped} malformed entries")
    finally:
        await store.close()

    return 0


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    settings = AppSettings.from_env()
    if args.mode:
        settings.mode = args.mode
    configure_logging(args.log_level or settings.log_level)

    try:
        exit_code = asyncio.run(run(args, settings))
    except KeyboardInterrupt:
        print("\n⚠️ Interrupted", file=sys.stderr)
        sys.exit(1)
    except (SnippetError, ValueError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    except Exception:
        logger.exception("Fatal error")
        print("\n❌ Fatal error occurred. See log for details.", file=sys.stderr)
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
