"""CLI entry point for formgrid.

This module acts as the central entry point for the project's CLI tools.
It delegates commands to the appropriate submodules.

Tree files are JSON lists of field nodes (or ``{"fields": [...]}``);
document files hold ``{"schema": ..., "uiSchema": ...}``.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import TypeAdapter

from formgrid.config import get_json_indent, get_store_path
from formgrid.core import get_logger, setup_logging
from formgrid.layout import assign_rows
from formgrid.output import OutputGenerator
from formgrid.parser import parse_form
from formgrid.session import FormSession
from formgrid.store import SQLiteFormStore
from formgrid.templates import get_template, list_templates
from formgrid.tree import FieldNode
from formgrid.validation import validate_tree

# Load environment variables from .env file
load_dotenv()

logger = get_logger("cli")

_TREE_ADAPTER = TypeAdapter(list[FieldNode])


# =============================================================================
# File Helpers
# =============================================================================


def _read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def _load_tree(path: Path) -> list[FieldNode]:
    """Read a tree file and lay it out, keeping any stored rows."""
    data = _read_json(path)
    if isinstance(data, dict):
        data = data.get("fields", [])
    return assign_rows(_TREE_ADAPTER.validate_python(data), keep_rows=True)


def _load_documents(path: Path) -> tuple[Any, Any]:
    data = _read_json(path)
    if not isinstance(data, dict) or "schema" not in data:
        raise ValueError(f"{path} does not contain a 'schema' document")
    return data["schema"], data.get("uiSchema")


def _dump_tree(nodes: list[FieldNode]) -> str:
    return _TREE_ADAPTER.dump_json(nodes, indent=get_json_indent()).decode()


def _emit(text: str, output: Path | None) -> None:
    if output:
        output.write_text(text, encoding="utf-8")
        logger.info(f"Written to {output}")
    else:
        print(text)


def _render(nodes: list[FieldNode], fmt: str, title: str = "Form") -> str:
    result = OutputGenerator(title=title).generate(nodes)
    documents = result.documents_json(indent=get_json_indent())
    if fmt == "tree":
        return result.text_tree
    if fmt == "all":
        return f"## Text Tree\n{result.text_tree}\n\n## Documents\n```json\n{documents}\n```"
    return documents


# =============================================================================
# Document Commands
# =============================================================================


def cmd_compile(args: argparse.Namespace) -> int:
    """Handle the compile command."""
    try:
        nodes = _load_tree(args.tree)
        _emit(_render(nodes, args.format), args.output)
        return 0
    except Exception as e:
        logger.error(f"Compilation failed: {e}")
        return 1


def cmd_parse(args: argparse.Namespace) -> int:
    """Handle the parse command."""
    try:
        schema, ui_schema = _load_documents(args.documents)
        nodes = parse_form(schema, ui_schema)
        logger.info(f"Parsed {len(nodes)} field(s) from {args.documents}")
        _emit(_dump_tree(nodes), args.output)
        return 0
    except Exception as e:
        logger.error(f"Parsing failed: {e}")
        return 1


def cmd_validate(args: argparse.Namespace) -> int:
    """Handle the validate command."""
    try:
        nodes = _load_tree(args.tree)
    except Exception as e:
        logger.error(f"Could not load {args.tree}: {e}")
        return 1

    errors = validate_tree(nodes)
    if not errors:
        logger.info(f"{args.tree}: valid")
        return 0

    for error in errors:
        logger.error(f"[{error.error_type}] {error.node_id}: {error.message}")
    logger.error(f"{args.tree}: {len(errors)} problem(s)")
    return 1


def cmd_tree(args: argparse.Namespace) -> int:
    """Handle the tree command."""
    try:
        if args.documents:
            nodes = parse_form(*_load_documents(args.file))
        else:
            nodes = _load_tree(args.file)
        _emit(_render(nodes, "tree", title=args.file.stem), None)
        return 0
    except Exception as e:
        logger.error(f"Could not render {args.file}: {e}")
        return 1


def _add_output_args(parser: argparse.ArgumentParser, formats: bool = True) -> None:
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Write to file instead of stdout",
    )
    if formats:
        parser.add_argument(
            "--format",
            "-f",
            choices=["json", "tree", "all"],
            default="json",
            help="Output format (default: json)",
        )


def handle_document_command(command: str, argv: list[str]) -> int:
    """Handle compile/parse/validate/tree commands."""
    parser = argparse.ArgumentParser(prog=f"python . {command}")

    match command:
        case "compile":
            parser.description = "Compile a field tree into form documents"
            parser.add_argument("tree", type=Path, help="Tree file (JSON)")
            _add_output_args(parser)
            parser.set_defaults(func=cmd_compile)
        case "parse":
            parser.description = "Rebuild a field tree from form documents"
            parser.add_argument("documents", type=Path, help="Documents file (JSON)")
            _add_output_args(parser, formats=False)
            parser.set_defaults(func=cmd_parse)
        case "validate":
            parser.description = "Check a field tree for structural problems"
            parser.add_argument("tree", type=Path, help="Tree file (JSON)")
            parser.set_defaults(func=cmd_validate)
        case "tree":
            parser.description = "Show a field tree as text"
            parser.add_argument("file", type=Path, help="Tree or documents file")
            parser.add_argument(
                "--documents",
                "-d",
                action="store_true",
                help="Read the file as form documents",
            )
            parser.set_defaults(func=cmd_tree)

    args = parser.parse_args(argv)
    return args.func(args)


# =============================================================================
# Templates Command
# =============================================================================


def cmd_templates_list(_args: argparse.Namespace) -> int:
    """Handle the templates list command."""
    logger.info("Available templates:")
    for template in list_templates():
        logger.info(f"  {template.id:<14} {template.name} - {template.description}")
    return 0


def cmd_templates_show(args: argparse.Namespace) -> int:
    """Handle the templates show command."""
    try:
        template = get_template(args.template)
    except KeyError as e:
        logger.error(e.args[0])
        return 1

    nodes = template.build()
    if args.format == "tree-json":
        text = _dump_tree(nodes)
    else:
        text = _render(nodes, args.format, title=template.name)
    _emit(text, args.output)
    return 0


def handle_templates_command(argv: list[str]) -> int:
    """Handle templates-specific commands."""
    parser = argparse.ArgumentParser(
        prog="python . templates",
        description="Built-in form templates",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    list_parser = subparsers.add_parser("list", help="List templates")
    list_parser.set_defaults(func=cmd_templates_list)

    show_parser = subparsers.add_parser("show", help="Show a template")
    show_parser.add_argument("template", type=str, help="Template ID (e.g. login)")
    show_parser.add_argument(
        "--format",
        "-f",
        choices=["json", "tree", "all", "tree-json"],
        default="tree",
        help="Output format (default: tree)",
    )
    show_parser.add_argument("--output", "-o", type=Path, default=None)
    show_parser.set_defaults(func=cmd_templates_show)

    if not argv:
        return cmd_templates_list(argparse.Namespace())

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    return args.func(args)


# =============================================================================
# Forms Command
# =============================================================================


def _open_store(args: argparse.Namespace) -> SQLiteFormStore:
    store = SQLiteFormStore(get_store_path(args.db))
    store.initialize()
    return store


def cmd_forms_list(args: argparse.Namespace) -> int:
    """Handle the forms list command."""
    store = _open_store(args)
    try:
        forms = store.list_forms(limit=args.limit)
        if not forms:
            logger.info("No saved forms")
            return 0
        for form in forms:
            updated = form.updated_at.strftime("%Y-%m-%d %H:%M")
            logger.info(f"  {form.id}  {updated}  {form.name}")
        return 0
    finally:
        store.close()


def cmd_forms_show(args: argparse.Namespace) -> int:
    """Handle the forms show command."""
    store = _open_store(args)
    try:
        form = store.get(args.form_id)
        if form is None:
            logger.error(f"No saved form with id {args.form_id}")
            return 1
        if args.format == "json":
            text = json.dumps(
                {"schema": form.schema, "uiSchema": form.ui_schema},
                indent=get_json_indent(),
            )
        else:
            session = FormSession()
            session.load_stored(form)
            text = _render(session.nodes, args.format, title=form.name)
        _emit(text, args.output)
        return 0
    finally:
        store.close()


def cmd_forms_save(args: argparse.Namespace) -> int:
    """Handle the forms save command."""
    session = FormSession(name=args.name, description=args.description, form_id=args.id)
    try:
        if args.documents:
            session.load_documents(
                *_load_documents(args.file),
                name=args.name,
                description=args.description,
                form_id=args.id,
            )
        else:
            session.nodes = _load_tree(args.file)
        form = session.to_stored()
    except Exception as e:
        logger.error(f"Could not save {args.file}: {e}")
        return 1

    store = _open_store(args)
    try:
        store.save(form)
        logger.info(f"Saved '{form.name}' as {form.id}")
        return 0
    finally:
        store.close()


def cmd_forms_delete(args: argparse.Namespace) -> int:
    """Handle the forms delete command."""
    store = _open_store(args)
    try:
        if not store.delete(args.form_id):
            logger.error(f"No saved form with id {args.form_id}")
            return 1
        logger.info(f"Deleted {args.form_id}")
        return 0
    finally:
        store.close()


def handle_forms_command(argv: list[str]) -> int:
    """Handle forms-specific commands."""
    parser = argparse.ArgumentParser(
        prog="python . forms",
        description="Manage saved forms",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="SQLite file (default: FORMGRID_STORE_PATH or .formgrid/forms.db)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    list_parser = subparsers.add_parser("list", help="List saved forms")
    list_parser.add_argument("--limit", "-n", type=int, default=50)
    list_parser.set_defaults(func=cmd_forms_list)

    show_parser = subparsers.add_parser("show", help="Show a saved form")
    show_parser.add_argument("form_id", type=str)
    _add_output_args(show_parser)
    show_parser.set_defaults(func=cmd_forms_show)

    save_parser = subparsers.add_parser("save", help="Save a tree or documents file")
    save_parser.add_argument("file", type=Path, help="Tree or documents file")
    save_parser.add_argument("--name", required=True, help="Form name")
    save_parser.add_argument("--description", default="", help="Form description")
    save_parser.add_argument("--id", default=None, help="Overwrite an existing form")
    save_parser.add_argument(
        "--documents",
        "-d",
        action="store_true",
        help="Read the file as form documents",
    )
    save_parser.set_defaults(func=cmd_forms_save)

    delete_parser = subparsers.add_parser("delete", help="Delete a saved form")
    delete_parser.add_argument("form_id", type=str)
    delete_parser.set_defaults(func=cmd_forms_delete)

    if not argv:
        parser.print_help()
        return 1

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except Exception as e:
        logger.error(f"Store operation failed: {e}")
        return 1


# =============================================================================
# Main
# =============================================================================


def show_help() -> None:
    """Display CLI help message."""
    print("Usage: python . {command} [args]")
    print("\n=== Documents ===")
    print("  compile    Compile a field tree into schema + uiSchema")
    print("  parse      Rebuild a field tree from schema + uiSchema")
    print("  validate   Check a field tree for structural problems")
    print("  tree       Show a field tree as text")
    print("\n=== Forms ===")
    print("  templates  List and show built-in templates")
    print("  forms      Save, list, show and delete stored forms")
    print("\nExamples:")
    print("  python . compile form.json -o documents.json")
    print("  python . parse documents.json -o form.json")
    print("  python . tree documents.json --documents")
    print("  python . templates show registration")
    print("  python . forms save form.json --name 'Contact'")
    print("  python . forms list")


def main() -> int:
    """Main entry point for the CLI."""
    if len(sys.argv) < 2:
        show_help()
        return 1

    command = sys.argv[1]
    rest_args = sys.argv[2:]

    if command in ("-h", "--help"):
        show_help()
        return 0

    commands = {
        "compile": lambda: handle_document_command("compile", rest_args),
        "parse": lambda: handle_document_command("parse", rest_args),
        "validate": lambda: handle_document_command("validate", rest_args),
        "tree": lambda: handle_document_command("tree", rest_args),
        "templates": lambda: handle_templates_command(rest_args),
        "forms": lambda: handle_forms_command(rest_args),
    }

    if command in commands:
        setup_logging()
        return commands[command]()

    logger.error(f"Unknown command: {command}")
    show_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
