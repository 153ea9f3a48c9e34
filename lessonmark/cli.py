"""CLI: command-line interface for lessonmark."""

import argparse
import json
import logging
import pathlib
import sys

from lessonmark.config import load_settings
from lessonmark.gaps import answer_resolver, blank_resolver, gap_ids, normalize_gaps
from lessonmark.html_render import to_html
from lessonmark.models import GapMarker, LineBreak, ParagraphClose, ParagraphOpen
from lessonmark.mutator import FORMAT_COMMANDS, apply_format
from lessonmark.renderer import render
from lessonmark.tokenizer import tokenize


def _read_input(path: str | None) -> str:
    if not path or path == "-":
        return sys.stdin.read()
    return pathlib.Path(path).read_text()


def _describe(token) -> str:
    if isinstance(token, ParagraphOpen):
        return f"ParagraphOpen {token.raw_tag!r}"
    if isinstance(token, ParagraphClose):
        return "ParagraphClose"
    if isinstance(token, GapMarker):
        return f"GapMarker {token.id!r}"
    if isinstance(token, LineBreak):
        return "LineBreak"
    return f"TextRun {token.content!r}"


def cmd_tokens(args, settings: dict):
    for i, token in enumerate(tokenize(_read_input(args.file))):
        print(f"{i:4d}  {_describe(token)}")


def cmd_render(args, settings: dict):
    content = _read_input(args.file)
    resolver = blank_resolver
    if args.answers:
        answers = json.loads(pathlib.Path(args.answers).read_text())
        resolver = answer_resolver(answers)
    rendering = render(tokenize(content), resolver,
                       section_id=args.section,
                       spacer_height=settings.get("spacer_height", 16),
                       colors=settings.get("colors") or None)
    print(to_html(rendering.nodes, accent=settings.get("accent")))


def cmd_gaps(args, settings: dict):
    content = _read_input(args.file)
    if args.normalize:
        sys.stdout.write(normalize_gaps(content))
        return
    for gap_id in gap_ids(content):
        print(gap_id)


def cmd_format(args, settings: dict):
    content = _read_input(args.file)
    tokens = tokenize(content)
    new_content = apply_format(tokens, args.paragraph, args.format_command, args.value)
    if not 0 <= args.paragraph < len(tokens) or not isinstance(tokens[args.paragraph], ParagraphOpen):
        print(f"Warning: token {args.paragraph} is not a paragraph tag; nothing changed",
              file=sys.stderr)
    if args.in_place and args.file and args.file != "-":
        pathlib.Path(args.file).write_text(new_content)
    else:
        sys.stdout.write(new_content)


def cmd_serve(args, settings: dict):
    from lessonmark.server import start_edit_server
    from lessonmark.session import EditSession, markup_fields

    record_path = pathlib.Path(args.record)
    record = json.loads(record_path.read_text())
    fields = markup_fields(record)
    print(f"{len(fields)} markup field(s) in {record_path}")

    def save(rec):
        record_path.write_text(json.dumps(rec, ensure_ascii=False, indent=2) + "\n")
        print(f"Saved {record_path}")

    if args.port:
        settings = dict(settings)
        settings["edit_port"] = args.port
    session = EditSession(record, settings=settings, on_gap_found=blank_resolver)
    start_edit_server(session, settings, save_fn=save)


def main():
    parser = argparse.ArgumentParser(prog="lessonmark",
                                     description="Render and edit lesson markup")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--config", help="Settings file (default: ~/.config/lessonmark/settings.toml)")
    subparsers = parser.add_subparsers(dest="command")

    p_tokens = subparsers.add_parser("tokens", help="Print the token sequence")
    p_tokens.add_argument("file", nargs="?", help="Markup file (default: stdin)")

    p_render = subparsers.add_parser("render", help="Render markup to HTML")
    p_render.add_argument("file", nargs="?", help="Markup file (default: stdin)")
    p_render.add_argument("--answers", help="JSON file mapping gap id to answer")
    p_render.add_argument("--section", help="Section id for segment ids")

    p_gaps = subparsers.add_parser("gaps", help="List gap ids")
    p_gaps.add_argument("file", nargs="?", help="Markup file (default: stdin)")
    p_gaps.add_argument("--normalize", action="store_true",
                        help="Print markup with id-less gaps numbered instead")

    p_format = subparsers.add_parser("format", help="Apply a format command to one paragraph")
    p_format.add_argument("file", help="Markup file, or - for stdin")
    p_format.add_argument("--paragraph", type=int, required=True,
                          help="Token index of the paragraph open tag")
    p_format.add_argument("--command", required=True, choices=FORMAT_COMMANDS,
                          dest="format_command")
    p_format.add_argument("--value", help="Value for color/size")
    p_format.add_argument("--in-place", action="store_true", help="Rewrite the file")

    p_serve = subparsers.add_parser("serve", help="Edit the markup fields of a JSON record")
    p_serve.add_argument("record", help="JSON content record")
    p_serve.add_argument("--port", type=int, help="Server port (default: edit_port setting)")

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    settings = load_settings(args.config)

    try:
        if args.command == "tokens":
            cmd_tokens(args, settings)
        elif args.command == "render":
            cmd_render(args, settings)
        elif args.command == "gaps":
            cmd_gaps(args, settings)
        elif args.command == "format":
            cmd_format(args, settings)
        elif args.command == "serve":
            cmd_serve(args, settings)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
