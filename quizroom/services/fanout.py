"""
Run a set of independent store writes concurrently and collect what happened.

Tasks target disjoint documents, so they run in no particular order.
Nothing is cancelled once submitted: every task is allowed to finish and
its outcome is recorded in a FanoutReport.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, List, Tuple

from google.api_core.exceptions import NotFound

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


@dataclass
class Task:
    label: str
    fn: Callable[[], object]
    # NotFound from this task is an expected outcome, not a failure.
    missing_ok: bool = False


@dataclass
class FanoutReport:
    succeeded: List[str] = field(default_factory=list)
    ignored: List[str] = field(default_factory=list)
    failed: List[Tuple[str, Exception]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def first_error(self):
        return self.failed[0][1] if self.failed else None


def run_concurrently(tasks, max_workers=DEFAULT_MAX_WORKERS):
    """Run every task and return a FanoutReport."""
    report = FanoutReport()
    if not tasks:
        return report

    workers = max(1, min(max_workers, len(tasks)))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {executor.submit(task.fn): task for task in tasks}
        for future in as_completed(futures):
            task = futures[future]
            try:
                future.result()
            except NotFound as e:
                if task.missing_ok:
                    logger.debug('%s: document missing, ignored', task.label)
                    report.ignored.append(task.label)
                else:
                    report.failed.append((task.label, e))
            except Exception as e:
                report.failed.append((task.label, e))
            else:
                report.succeeded.append(task.label)

    for label, error in report.failed:
        logger.warning('%s failed: %s', label, error)
    return report
