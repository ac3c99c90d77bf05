"""
UPL 语法检查命令行
用法: uplcc <source-file>
"""

import argparse
import logging
import sys

from .config import DEFAULT_LIMITS
from .error import FrontendError
from .pipeline import UplFrontend


class _ArgumentParser(argparse.ArgumentParser):
    """参数错误时以状态码 1 退出"""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog="uplcc", description="Check the syntax of a UPL program.")
    parser.add_argument("source", help="UPL source file")
    parser.add_argument("--max-statements", type=int, default=None,
                        help=f"statements allowed per block (default {DEFAULT_LIMITS.max_statements})")
    parser.add_argument("--max-errors", type=int, default=None,
                        help=f"diagnostics recorded at most (default {DEFAULT_LIMITS.max_diagnostics})")
    parser.add_argument("--max-symbols", type=int, default=None,
                        help=f"distinct variables allowed (default {DEFAULT_LIMITS.max_symbols})")
    parser.add_argument("--max-lexeme-len", type=int, default=None,
                        help=f"longest token text kept (default {DEFAULT_LIMITS.max_lexeme_len})")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="log parser activity to stderr")
    return parser


def main(argv=None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        limits = DEFAULT_LIMITS.replace(
            max_statements=args.max_statements,
            max_diagnostics=args.max_errors,
            max_symbols=args.max_symbols,
            max_lexeme_len=args.max_lexeme_len,
        )
    except ValueError as e:
        parser.error(str(e))

    try:
        result = UplFrontend(limits).process_file(args.source)
    except FrontendError as e:
        print(e, file=sys.stderr)
        return 1

    print(result.render())
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
