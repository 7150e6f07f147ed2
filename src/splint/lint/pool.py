"""
Worker pool for linting many files.

Files are independent: each worker reads, tokenizes and scans one file
against the shared compiled rules (read-only, never copied) and pushes its
diagnostics into a DiagnosticSink, the only shared mutable state.

Usage:
    from splint.lint.pool import LintPool

    pool = LintPool(compiled_rules, num_workers=4)
    report = pool.run(paths)
    if report.any_failure:
        ...

Interrupting a run (Ctrl-C) cancels queued files and discards results.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Iterable, List, Sequence, Union

from splint.config import DEFAULT_WORKERS
from splint.lint.compiler import CompiledRule, CompiledRuleSet
from splint.lint.diagnostics import DiagnosticSink, FileFailure, LintReport
from splint.lint.runner import lint_file
from splint.parser.lexer import LexerError

logger = logging.getLogger(__name__)


class LintPool:
    """
    Bounded pool of lint workers.

    Handles:
    - Dispatching one file per task
    - Recording unreadable/untokenizable files as FileFailure
    - Cancelling queued work on interrupt
    """

    def __init__(
        self,
        rules: Union[CompiledRuleSet, Sequence[CompiledRule]],
        num_workers: int = DEFAULT_WORKERS,
    ):
        if num_workers < 1:
            raise ValueError("num_workers must be at least 1")
        self.rules = rules
        self._rule_list = tuple(rules)
        self.num_workers = num_workers
        self._stats_lock = threading.Lock()
        self.files_done = 0
        self.files_failed = 0

    def _lint_one(self, path: Path, sink: DiagnosticSink) -> None:
        try:
            diagnostics = lint_file(path, self._rule_list)
        except (OSError, LexerError) as e:
            logger.warning("Couldn't lint %s: %s", path, e)
            sink.add_failure(FileFailure(str(path), type(e).__name__, str(e)))
            with self._stats_lock:
                self.files_failed += 1
            return

        sink.add_file(str(path), diagnostics)
        with self._stats_lock:
            self.files_done += 1

    def run(self, paths: Iterable[Path]) -> LintReport:
        """Lint every path and return the combined, ordered report."""
        paths = [Path(p) for p in paths]
        sink = DiagnosticSink()
        started = time.perf_counter()

        workers = min(self.num_workers, len(paths))
        if workers <= 1:
            for path in paths:
                self._lint_one(path, sink)
        else:
            self._run_parallel(paths, sink, workers)

        report = sink.report()
        report.config_errors = list(getattr(self.rules, "errors", []))
        report.elapsed_ms = (time.perf_counter() - started) * 1000
        logger.debug(
            "Linted %d files with %d workers in %.1fms",
            report.files_scanned, max(workers, 1), report.elapsed_ms,
        )
        return report

    def _run_parallel(self, paths: List[Path], sink: DiagnosticSink, workers: int) -> None:
        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="splint-worker")
        try:
            futures = [executor.submit(self._lint_one, path, sink) for path in paths]
            for future in as_completed(futures):
                # Re-raise anything unexpected from a worker
                future.result()
        except BaseException:
            executor.shutdown(wait=False, cancel_futures=True)
            raise
        executor.shutdown(wait=True)

    def get_stats(self) -> dict:
        """Get pool statistics."""
        with self._stats_lock:
            return {
                "num_workers": self.num_workers,
                "rules": len(self._rule_list),
                "files_done": self.files_done,
                "files_failed": self.files_failed,
            }


def lint_paths(
    paths: Iterable[Path],
    rules: Union[CompiledRuleSet, Sequence[CompiledRule]],
    num_workers: int = DEFAULT_WORKERS,
) -> LintReport:
    """Convenience wrapper: lint paths with a fresh pool."""
    return LintPool(rules, num_workers=num_workers).run(paths)
