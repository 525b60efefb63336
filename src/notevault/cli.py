"""CLI for notevault - an encrypted single-file note vault."""

import argparse
import json
import platform
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .adapters.keycodec import generate_key_hex
from .runtime import build_runtime


def _read_content(args: argparse.Namespace) -> str | None:
    """--content value, else non-empty piped stdin, else None."""
    if args.content is not None:
        return args.content
    if not sys.stdin.isatty():
        return sys.stdin.read() or None
    return None


def cmd_keygen(args: argparse.Namespace, rt: Any) -> int:
    """Print a new random 256-bit key as hex."""
    print(generate_key_hex())
    return 0


def cmd_init(args: argparse.Namespace, rt: Any) -> int:
    """Create a new empty vault."""
    with rt.session(args.key) as session:
        session.create(overwrite=args.force)

    if not args.quiet:
        print(f"Created vault {rt.vault_path}")
    return 0


def cmd_ls(args: argparse.Namespace, rt: Any) -> int:
    """List visible notes."""
    with rt.session(args.key) as session:
        if args.grep:
            notes = session.search(args.grep)
        else:
            notes = session.open()

    if args.json:
        print(json.dumps([{"id": n.id, "title": n.title} for n in notes], indent=2))
        return 0

    for n in notes:
        print(f"{n.id}\t{n.title}")
    return 0


def cmd_show(args: argparse.Namespace, rt: Any) -> int:
    """Print a note's title and content."""
    with rt.session(args.key) as session:
        note = session.read_note(args.id)

    if args.json:
        print(json.dumps({"id": note.id, "title": note.title, "content": note.content}, indent=2))
        return 0

    print(f"# {note.title}\n")
    print(note.content)
    return 0


def cmd_add(args: argparse.Namespace, rt: Any) -> int:
    """Add a new note."""
    content = _read_content(args) or ""

    with rt.session(args.key) as session:
        nid = session.add_note(args.title, content)

    if args.json:
        print(json.dumps({"id": nid}))
    elif not args.quiet:
        print(nid)
    return 0


def cmd_edit(args: argparse.Namespace, rt: Any) -> int:
    """Replace a note's title and/or content."""
    content = _read_content(args)
    if args.title is None and content is None:
        print("Error: nothing to change (give --title and/or --content)", file=sys.stderr)
        return 1

    with rt.session(args.key) as session:
        current = session.read_note(args.id)
        session.save_note(
            args.id,
            args.title if args.title is not None else current.title,
            content if content is not None else current.content,
        )

    if not args.quiet:
        print(f"Saved {args.id}")
    return 0


def cmd_rm(args: argparse.Namespace, rt: Any) -> int:
    """Hide a note. Its content stays in the vault."""
    with rt.session(args.key) as session:
        # Fail early on unknown ids before prompting
        session.read_note(args.id)

        # Confirm unless --yes
        if not args.yes:
            try:
                response = input(f"Delete note {args.id}? [y/N] ")
            except EOFError:
                response = ""
            if response.lower() not in ("y", "yes"):
                print("Aborted")
                return 0

        session.delete_note(args.id)

    if not args.quiet:
        print(f"Deleted {args.id}")
    return 0


def cmd_export(args: argparse.Namespace, rt: Any) -> int:
    """Export visible notes as plaintext Markdown."""
    with rt.session(args.key) as session:
        notes = session.export_notes()

    count = rt.exporter.export_all(notes, args.out)

    if not args.quiet:
        print(f"Exported {count} notes to {args.out}")
        print("Warning: exported files are not encrypted", file=sys.stderr)
    return 0


def cmd_import(args: argparse.Namespace, rt: Any) -> int:
    """Add every Markdown file in a directory as a new note."""
    src_dir = Path(args.src)
    if not src_dir.is_dir():
        print(f"Source directory does not exist: {src_dir}", file=sys.stderr)
        return 1

    pairs = rt.exporter.read_dir(src_dir)
    with rt.session(args.key) as session:
        ids = session.import_notes(pairs)

    if args.json:
        print(json.dumps({"imported": ids}))
    elif not args.quiet:
        print(f"Imported {len(ids)} notes")
    return 0


def cmd_serve(args: argparse.Namespace, rt: Any) -> int:
    """Start local JSON API server."""
    try:
        import uvicorn

        from .api.app import create_app, generate_token
    except ImportError as e:
        print(
            "Error: API dependencies not installed. "
            "Install with: pip install notevault[api]",
            file=sys.stderr
        )
        print(f"Details: {e}", file=sys.stderr)
        return 1

    token_arg = args.token
    if token_arg == 'auto':
        token = generate_token()
        print(f"Generated bearer token: {token}")
        print(f"Use in requests: Authorization: Bearer {token}")
    elif token_arg == 'none':
        print("Warning: Running without authentication. Only use in trusted environments.")
        token = None
    else:
        token = token_arg

    app = create_app(rt, token=token, enable_cors=args.cors)

    host = args.host or rt.config.serve.host
    port = args.port or rt.config.serve.port

    print(f"Starting server on http://{host}:{port}")
    print("Send the vault key per request in the X-Vault-Key header")

    uvicorn.run(app, host=host, port=port, log_level="info")
    return 0


def _version_string() -> str:
    return (
        f"notevault {__version__}\n"
        f"python {platform.python_version()}\n"
        f"platform {platform.platform()}"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notevault",
        description="Encrypted single-file note vault",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", action="version", version=_version_string()
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: search cwd/notevault.toml, next to vault)",
    )
    parser.add_argument(
        "--vault",
        type=Path,
        default=None,
        help="Path to vault file (overrides config)",
    )
    parser.add_argument(
        "--key",
        default=None,
        help="Vault key as 64 hex characters (default: $NOTEVAULT_KEY)",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Minimize output"
    )
    parser.add_argument(
        "--json", action="store_true", help="Machine-readable output"
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    # keygen command
    subparsers.add_parser("keygen", help="Print a new random key")

    # init command
    parser_init = subparsers.add_parser("init", help="Create a new vault")
    parser_init.add_argument(
        "--force", action="store_true", help="Overwrite an existing vault file"
    )

    # ls command
    parser_ls = subparsers.add_parser("ls", help="List notes")
    parser_ls.add_argument("--grep", help="Filter by title or content")

    # show command
    parser_show = subparsers.add_parser("show", help="Print a note")
    parser_show.add_argument("id", type=int, help="Note ID")

    # add command
    parser_add = subparsers.add_parser("add", help="Add a note")
    parser_add.add_argument("--title", required=True, help="Note title")
    parser_add.add_argument(
        "--content", default=None, help="Note content (default: read stdin)"
    )

    # edit command
    parser_edit = subparsers.add_parser("edit", help="Change a note")
    parser_edit.add_argument("id", type=int, help="Note ID")
    parser_edit.add_argument("--title", default=None, help="New title")
    parser_edit.add_argument(
        "--content", default=None, help="New content (default: read stdin)"
    )

    # rm command
    parser_rm = subparsers.add_parser("rm", help="Delete (hide) a note")
    parser_rm.add_argument("id", type=int, help="Note ID")
    parser_rm.add_argument(
        "-y", "--yes", action="store_true", help="Skip confirmation"
    )

    # export command
    parser_export = subparsers.add_parser("export", help="Export notes as Markdown")
    parser_export.add_argument("out", type=Path, help="Output directory")

    # import command
    parser_import = subparsers.add_parser("import", help="Import Markdown files")
    parser_import.add_argument("src", type=Path, help="Source directory")

    # serve command
    parser_serve = subparsers.add_parser("serve", help="Start local JSON API")
    parser_serve.add_argument("--host", default=None, help="Bind host")
    parser_serve.add_argument("--port", type=int, default=None, help="Bind port")
    parser_serve.add_argument(
        "--token",
        default="auto",
        help="Bearer token: 'auto' (generate), 'none' (no auth), or a literal token",
    )
    parser_serve.add_argument(
        "--cors", action="store_true", help="Enable CORS"
    )

    return parser


def main() -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()

    try:
        rt = build_runtime(vault_path=args.vault, config_path=args.config)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    handlers = {
        "keygen": cmd_keygen,
        "init": cmd_init,
        "ls": cmd_ls,
        "show": cmd_show,
        "add": cmd_add,
        "edit": cmd_edit,
        "rm": cmd_rm,
        "export": cmd_export,
        "import": cmd_import,
        "serve": cmd_serve,
    }

    handler = handlers.get(args.cmd)
    if handler:
        try:
            exit_code = handler(args, rt)
            sys.exit(exit_code)
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        print(f"Unknown command: {args.cmd}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
