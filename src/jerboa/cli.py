"""Jerboa CLI — run .jb files, dump tokens or AST, or start a REPL."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from .emit import to_source
from .evaluator import EvalError, Evaluator, ParsingError
from .parse import ParserError, parse
from .tokens import tokenize
from .values import UnitValue


USAGE: str = """\
jerboa [OPTIONS] [FILE]

Run a Jerboa program. Without FILE, start an interactive session.

Options:
  --tokens        Print the token stream and exit
  --ast           Print the parsed program in canonical form and exit
  --echo          Print the value of every top-level statement
  -v, --verbose   Enable debug logging on stderr
  --help          Show this help message
"""

PROMPT: str = ">> "


def _report(err: Exception) -> str:
    if isinstance(err, (ParsingError, ParserError)):
        return "jerboa: parse error: " + str(err)
    if isinstance(err, RecursionError):
        return "jerboa: runtime error: maximum recursion depth exceeded"
    return "jerboa: runtime error: " + str(err)


def _print_results(results: list, out: TextIO) -> None:
    for value in results:
        if not isinstance(value, UnitValue):
            print(value.to_string(), file=out)


def repl(stdin: TextIO, stdout: TextIO, stderr: TextIO) -> int:
    """Read-eval-print loop. Bindings persist across lines; errors do not exit."""
    evaluator = Evaluator("", stdout=stdout)
    while True:
        stdout.write(PROMPT)
        stdout.flush()
        line = stdin.readline()
        if line == "":
            stdout.write("\n")
            return 0
        if line.strip() == "exit":
            return 0
        if line.strip() == "":
            continue
        evaluator.load(line)
        try:
            results = evaluator.eval_program()
        except (EvalError, RecursionError) as e:
            print(_report(e), file=stderr)
            continue
        _print_results(results, stdout)


def main(argv: list[str] | None = None) -> int:
    args = argv if argv is not None else sys.argv[1:]
    filepath: str = ""
    dump_tokens = False
    dump_ast = False
    echo = False
    verbose = False
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            return 0
        elif arg == "--tokens":
            dump_tokens = True
            i += 1
        elif arg == "--ast":
            dump_ast = True
            i += 1
        elif arg == "--echo":
            echo = True
            i += 1
        elif arg == "--verbose" or arg == "-v":
            verbose = True
            i += 1
        elif arg.startswith("-"):
            print("jerboa: unknown flag '" + arg + "'", file=sys.stderr)
            return 2
        elif filepath == "":
            filepath = arg
            i += 1
        else:
            print("jerboa: unexpected argument '" + arg + "'", file=sys.stderr)
            return 2

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if filepath == "":
        if dump_tokens or dump_ast:
            print("jerboa: missing file argument", file=sys.stderr)
            return 2
        return repl(sys.stdin, sys.stdout, sys.stderr)

    try:
        with open(filepath, "rb") as f:
            raw = f.read()
    except FileNotFoundError:
        print("jerboa: " + filepath + ": No such file or directory", file=sys.stderr)
        return 1
    except OSError as e:
        print("jerboa: " + filepath + ": " + str(e), file=sys.stderr)
        return 1
    try:
        source = raw.decode("utf-8")
    except ValueError:
        print("jerboa: " + filepath + ": invalid utf-8", file=sys.stderr)
        return 1

    if dump_tokens:
        for tok in tokenize(source):
            print(f"{tok.line}:{tok.col}\t{tok.kind}\t{tok.literal!r}")
        return 0

    if dump_ast:
        try:
            program = parse(source)
        except ParserError as e:
            print(_report(e), file=sys.stderr)
            return 1
        print(to_source(program))
        return 0

    try:
        results = Evaluator(source).eval_program()
    except (EvalError, RecursionError) as e:
        print(_report(e), file=sys.stderr)
        return 1

    if echo:
        _print_results(results, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
