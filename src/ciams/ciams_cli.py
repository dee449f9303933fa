"""
CIAMS CLI Entrypoint.

This module provides the command-line interface for the CIAMS front end.
It lexes and parses source text and prints the result as JSON.

Features:
    - Read source from `.ciams` files or inline strings.
    - Dump the token list (`--mode tokens`) or the AST (`--mode ast`, default).
    - Apply keyword aliases from a JSON file.
    - List the loaded aliases (`--list-aliases`).
    - Output to console or file.

Example usage:
    ciams hello.ciams
    ciams -s "Init x = 1 + 2;" -p
    ciams hello.ciams -m tokens -o tokens.json
    ciams hello.ciams -a aliases.json --verbose
    ciams hello.ciams -a aliases.json -l

Functions:
    run_ciams(source: str, is_string: bool = False, mode: str = "ast", out: str | None = None,
              pretty: bool = False, aliases: str | None = None,
              list_aliases: bool = False) -> int:
        Runs the pipeline (read → lex → parse → output) and returns an exit status.

    main() -> None:
        Parses CLI arguments and exits with the status of `run_ciams`.
"""

import argparse
import json
import logging
import sys

from ciams.ciams_lexer import tokenize
from ciams.ciams_parser import parse_program
from ciams.ciams_uimap import KeywordMapper, MappingError

logger = logging.getLogger(__name__)


def run_ciams(
    source: str,
    is_string: bool = False,
    mode: str = "ast",
    out: str | None = None,
    pretty: bool = False,
    aliases: str | None = None,
    list_aliases: bool = False,
) -> int:
    """
    Run the CIAMS front end and emit tokens or the AST as JSON.

    Args:
        source (str): CIAMS source code or path to a `.ciams` file.
        is_string (bool): If True, treats `source` as raw code. Defaults to False.
        mode (str): "tokens" or "ast". Defaults to "ast".
        out (str | None): Optional path to write the JSON to. If None, prints to stdout.
        pretty (bool): If True, indents the JSON output.
        aliases (str | None): Optional path to a JSON keyword alias file.
        list_aliases (bool): If True, prints the loaded alias table to stderr.

    Returns:
        int: 0 on success, 1 if the alias file is invalid or parsing fails,
            or if the syntax tree is nested too deeply to serialize.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.ciams'.
    """
    if not is_string and not source.endswith(".ciams"):
        raise ValueError("Only .ciams files are supported.")
    if not is_string:
        with open(source, encoding="utf-8") as f:
            source = f.read()

    keywords = None
    if aliases:
        mapper = KeywordMapper()
        try:
            mapper.load_from_json(aliases)
        except MappingError as e:
            print(f"error: {e}", file=sys.stderr)
            for conflict in e.conflicts:
                print(f"  {conflict}", file=sys.stderr)
            return 1
        if list_aliases:
            print(mapper.report(), file=sys.stderr)
        keywords = mapper.keyword_table()

    tokens = tokenize(source, keywords)

    if mode == "tokens":
        payload = [tok.to_dict() for tok in tokens]
    else:
        result = parse_program(tokens)
        if not result.ok:
            print(f"error: {result.error}", file=sys.stderr)
            return 1
        payload = result.program.to_dict()

    try:
        text = json.dumps(payload, indent=2 if pretty else None)
    except RecursionError:
        print("error: Syntax tree nested too deeply to serialize", file=sys.stderr)
        return 1
    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(text + "\n")
        logger.debug("Wrote %s output to %s", mode, out)
    else:
        print(text)
    return 0


def main() -> None:
    """
    Entry point for the CIAMS CLI.

    Supported flags:
        - `-s`, `--string`: Interpret source as a raw string instead of a file path.
        - `-m`, `--mode`: What to print, 'tokens' or 'ast' (default).
        - `-o`, `--out`: Write the JSON to a file.
        - `-p`, `--pretty`: Indent the JSON output.
        - `-a`, `--aliases`: JSON file of keyword aliases.
        - `-l`, `--list-aliases`: Print the loaded alias table to stderr.
        - `--verbose`: Enable debug logging.
    """
    parser = argparse.ArgumentParser(prog="ciams")
    parser.add_argument("source", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "-m",
        "--mode",
        choices=("tokens", "ast"),
        default="ast",
        help="Output tokens or the syntax tree (default: ast)",
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    parser.add_argument("-p", "--pretty", action="store_true", help="Indent JSON output")
    parser.add_argument(
        "-a", "--aliases", metavar="FILE", help="JSON file of keyword aliases"
    )
    parser.add_argument(
        "-l",
        "--list-aliases",
        action="store_true",
        help="Print the alias table loaded with -a to stderr",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        status = run_ciams(
            source=args.source,
            is_string=args.string,
            mode=args.mode,
            out=args.out,
            pretty=args.pretty,
            aliases=args.aliases,
            list_aliases=args.list_aliases,
        )
    except (ValueError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        status = 1
    sys.exit(status)


if __name__ == "__main__":
    main()
