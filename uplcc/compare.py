"""
UPL 批量对比工具
================
对目录下所有 .upl 文件，分别用递归下降前端（UplFrontend）和
Lark 参考文法（ReferenceParser）分析，比较两者的结论与 AST。

用法: uplcc-compare <scripts-dir> [-o summary.txt]
"""

import argparse
import difflib
import logging
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from .pipeline import UplFrontend
from .reference import ReferenceParser, ReferenceParseError
from .tree.nodes import pretty

logger = logging.getLogger(__name__)


class Status(Enum):
    SAME           = 'SAME'            # 都接受，AST 相同
    DIFF           = 'DIFF'            # 都接受，AST 不同
    REJECTED       = 'REJECTED'        # 都拒绝
    FRONTEND_ONLY  = 'FRONTEND_ONLY'   # 只有前端接受
    REFERENCE_ONLY = 'REFERENCE_ONLY'  # 只有参考文法接受（例如未声明变量）


@dataclass
class Comparison:
    path:   Path
    status: Status
    detail: str = ''


@dataclass
class Summary:
    results: List[Comparison] = field(default_factory=list)

    def count(self, status: Status) -> int:
        return sum(1 for r in self.results if r.status == status)

    @property
    def has_diffs(self) -> bool:
        return self.count(Status.DIFF) > 0

    def render(self, root: Path) -> str:
        lines = [f"共 {len(self.results)} 个文件", "=" * 60, ""]
        for r in self.results:
            if r.status == Status.SAME:
                continue
            lines.append(f"[{r.status.value}] {r.path.relative_to(root)}")
            if r.detail:
                lines.append(r.detail.rstrip('\n'))
            lines.append("")
        lines.append("=" * 60)
        lines.append("结果汇总:")
        for status in Status:
            lines.append(f"  {status.value:<15} {self.count(status)}")
        return '\n'.join(lines) + '\n'


def collect_sources(root: Path) -> List[Path]:
    """递归收集目录下所有 .upl 文件"""
    return sorted(root.rglob("*.upl"))


def compare_source(source: str, path: Path,
                   frontend: UplFrontend, reference: ReferenceParser) -> Comparison:
    result = frontend.process_string(source)
    try:
        ref_ast = reference.parse(source)
        ref_err = None
    except ReferenceParseError as e:
        ref_ast, ref_err = None, str(e)

    if result.success and ref_ast is not None:
        # 按打印文本比较；dataclass 的 == 是递归的，深树会爆栈
        ref_text, ours_text = pretty(ref_ast), pretty(result.ast)
        if ref_text == ours_text:
            return Comparison(path, Status.SAME)
        diff = difflib.unified_diff(
            ref_text.splitlines(),
            ours_text.splitlines(),
            fromfile=f"reference: {path.name}",
            tofile=f"frontend:  {path.name}",
            lineterm='',
        )
        return Comparison(path, Status.DIFF, '\n'.join(diff))

    if result.success:
        return Comparison(path, Status.FRONTEND_ONLY, f"  [参考文法报错] {ref_err}")
    if ref_ast is not None:
        return Comparison(path, Status.REFERENCE_ONLY,
                          "  [前端报错]\n" + result.diags.report())
    return Comparison(path, Status.REJECTED)


def compare_directory(root: Path, frontend: UplFrontend = None,
                      reference: ReferenceParser = None) -> Summary:
    frontend = frontend or UplFrontend()
    reference = reference or ReferenceParser()
    summary = Summary()

    sources = collect_sources(root)
    total = len(sources)
    for i, path in enumerate(sources, 1):
        source = path.read_text(encoding='utf-8', errors='replace')
        comparison = compare_source(source, path, frontend, reference)
        logger.info("[%d/%d] %-14s %s", i, total, comparison.status.value, path.relative_to(root))
        summary.results.append(comparison)
    return summary


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="uplcc-compare",
        description="Compare the recovering parser against the reference grammar.")
    parser.add_argument("scripts_dir", help="directory searched recursively for *.upl files")
    parser.add_argument("-o", "--output", help="write the summary to this file instead of stdout")
    parser.add_argument("-v", "--verbose", action="store_true", help="log progress per file")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING,
                        format="%(message)s")

    root = Path(args.scripts_dir)
    if not root.is_dir():
        print(f"[ERROR] not a directory: {root}", file=sys.stderr)
        return 1

    summary = compare_directory(root)
    text = summary.render(root)
    if args.output:
        Path(args.output).write_text(text, encoding='utf-8')
        print(f"结果在: {args.output}")
    else:
        print(text, end='')
    return 1 if summary.has_diffs else 0


if __name__ == "__main__":
    sys.exit(main())
