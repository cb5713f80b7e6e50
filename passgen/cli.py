"""passgen command-line interface.

Usage examples:
    python -m passgen generate -n 20 -c 5
    python -m passgen generate -n 8 --require upper=1 --require digits=2
    python -m passgen score mypassword --discrete
    python -m passgen rebalance -n 16 --counts upper=3 lower=3 digits=3 special=3 --set upper=6
"""

import argparse
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

from passgen import (
    BASIC_SYMBOLS,
    SYMBOLS,
    CharClass,
    ConfigurationError,
    GenerationConfig,
    analyse_strength,
    distribute_counts,
    generate_password,
    rebalance,
)

log = logging.getLogger("passgen.cli")

_CLASS_NAMES = {
    "upper": CharClass.UPPERCASE,
    "uppercase": CharClass.UPPERCASE,
    "lower": CharClass.LOWERCASE,
    "lowercase": CharClass.LOWERCASE,
    "digits": CharClass.DIGITS,
    "numbers": CharClass.DIGITS,
    "special": CharClass.SPECIAL,
    "symbols": CharClass.SPECIAL,
}


def _char_class(text: str) -> CharClass:
    try:
        return _CLASS_NAMES[text.strip().lower()]
    except KeyError:
        raise argparse.ArgumentTypeError(
            f"unknown character class {text!r} "
            f"(choose from {', '.join(sorted(_CLASS_NAMES))})"
        ) from None


def _class_count(text: str) -> tuple[CharClass, int]:
    """Parse a ``CLASS=N`` argument."""
    name, sep, value = text.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected CLASS=N, got {text!r}")
    try:
        count = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"count must be an integer, got {value!r}") from None
    if count < 0:
        raise argparse.ArgumentTypeError(f"count must be non-negative, got {count}")
    return _char_class(name), count


def _setup_logging(verbose: bool) -> None:
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    # Only the package logger; the caller's root configuration is left alone
    pkg_logger = logging.getLogger("passgen")
    pkg_logger.handlers[:] = [handler]
    pkg_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="passgen",
        description="Generate random passwords and estimate their strength.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    sub = parser.add_subparsers(dest="command")

    # ── generate ───────────────────────────────────────────────────────
    gen_p = sub.add_parser("generate", help="Generate random passwords")
    gen_p.add_argument(
        "-n", "--length", type=int, default=12,
        help="Password length (default: 12)",
    )
    gen_p.add_argument(
        "-c", "--count", type=int, default=1,
        help="Number of passwords to generate (default: 1)",
    )
    gen_p.add_argument("--no-uppercase", action="store_true")
    gen_p.add_argument("--no-lowercase", action="store_true")
    gen_p.add_argument("--no-digits", action="store_true")
    gen_p.add_argument("--no-symbols", action="store_true")
    gen_p.add_argument(
        "--basic-symbols", action="store_true",
        help=f"Use the reduced symbol set {BASIC_SYMBOLS!r}",
    )
    gen_p.add_argument(
        "-r", "--require", type=_class_count, action="append", default=[],
        metavar="CLASS=N",
        help="Require at least N characters of CLASS (repeatable)",
    )
    gen_p.add_argument(
        "--ensure-each", action="store_true",
        help="Guarantee one character from every enabled class",
    )
    gen_p.add_argument(
        "--auto-counts", action="store_true",
        help="Split the length evenly across enabled classes as required counts",
    )

    # ── score ──────────────────────────────────────────────────────────
    score_p = sub.add_parser("score", help="Estimate password strength")
    score_p.add_argument("passwords", nargs="*", help="Passwords to score")
    score_p.add_argument(
        "-f", "--file",
        help="Read passwords from a file (one per line)",
    )
    score_p.add_argument(
        "--discrete", action="store_true",
        help="Show the five-level rating instead of the 0-100 score",
    )

    # ── rebalance ──────────────────────────────────────────────────────
    bal_p = sub.add_parser(
        "rebalance", help="Change one class count and rebalance the others",
    )
    bal_p.add_argument(
        "-n", "--length", type=int, default=12,
        help="Password length (default: 12)",
    )
    bal_p.add_argument(
        "--counts", type=_class_count, nargs="+", default=[],
        metavar="CLASS=N", help="Current per-class counts",
    )
    bal_p.add_argument(
        "--set", dest="change", type=_class_count, required=True,
        metavar="CLASS=N", help="The class count being changed",
    )
    bal_p.add_argument(
        "--disable", type=_char_class, action="append", default=[],
        metavar="CLASS", help="Treat CLASS as disabled (repeatable)",
    )

    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    try:
        if args.command == "generate":
            return _cmd_generate(args)
        if args.command == "score":
            return _cmd_score(args)
        if args.command == "rebalance":
            return _cmd_rebalance(args)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    parser.print_help()
    return 0


def _cmd_generate(args: argparse.Namespace) -> int:
    enabled = {
        CharClass.UPPERCASE: not args.no_uppercase,
        CharClass.LOWERCASE: not args.no_lowercase,
        CharClass.DIGITS: not args.no_digits,
        CharClass.SPECIAL: not args.no_symbols,
    }

    counts = dict(args.require)
    if args.auto_counts:
        auto = distribute_counts(args.length, [c for c, on in enabled.items() if on])
        counts = {**auto, **counts}
        log.debug("Auto counts: %s", {c.value: n for c, n in counts.items()})

    config = GenerationConfig.from_flags(
        args.length,
        uppercase=enabled[CharClass.UPPERCASE],
        lowercase=enabled[CharClass.LOWERCASE],
        digits=enabled[CharClass.DIGITS],
        special=enabled[CharClass.SPECIAL],
        counts=counts,
        symbols=BASIC_SYMBOLS if args.basic_symbols else SYMBOLS,
        ensure_each=args.ensure_each,
    )

    for _ in range(args.count):
        pwd = generate_password(config)
        report = analyse_strength(pwd)
        print(f"  {pwd}  ({report['label']}, {report['score']}/100)")

    return 0


def _cmd_score(args: argparse.Namespace) -> int:
    passwords = list(args.passwords)

    if args.file:
        with open(args.file) as f:
            passwords.extend(line.rstrip("\r\n") for line in f if line.strip())

    if not passwords:
        print("Error: provide passwords as arguments or via --file", file=sys.stderr)
        return 1

    for pwd in passwords:
        report = analyse_strength(pwd)
        if args.discrete:
            print(f"  '{pwd}' -- {report['rating']}")
            continue
        filled = report["score"] // 10
        bar = "#" * filled + "-" * (10 - filled)
        print(f"  '{pwd}' -- [{bar}] {report['score']}/100 {report['label']}")

    return 0


def _cmd_rebalance(args: argparse.Namespace) -> int:
    counts = dict(args.counts)
    changed, value = args.change
    enabled = [c for c in CharClass if c not in args.disable]

    result = rebalance(counts, changed, value, args.length, enabled)
    for c in CharClass:
        state = "" if c in enabled else "  (disabled)"
        print(f"  {c.value:<10} {result[c]:>2}{state}")
    print(f"  {'total':<10} {sum(result[c] for c in enabled):>2} / {args.length}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
