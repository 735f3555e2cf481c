"""Shared fixtures and strict test-accounting guardrails."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

import pytest

from bundler.graph import DependencyGraph, build_graph
from bundler.parser import SoupParser
from bundler.store import FileStore
from bundler.urls import path_to_url

ROOT = "/project"


@pytest.fixture
def root() -> str:
    return ROOT


@pytest.fixture
def make_store():
    """Build a FileStore from ``{relative_path: content}``."""

    def _make(files: Dict[str, str], root: str = ROOT) -> FileStore:
        store = FileStore()
        for path, content in files.items():
            store.add(path_to_url(root, path), content)
        return store

    return _make


@pytest.fixture
def make_graph(make_store):
    def _make(files: Dict[str, str]) -> DependencyGraph:
        return build_graph(make_store(files), SoupParser())

    return _make


@dataclass
class _TestAccounting:
    deselected: int = 0
    skipped: int = 0
    xfailed: int = 0
    xpassed: int = 0

    def violations(self) -> List[str]:
        return [
            f"{name}={count}"
            for name, count in (
                ("deselected", self.deselected),
                ("skipped", self.skipped),
                ("xfailed", self.xfailed),
                ("xpassed", self.xpassed),
            )
            if count
        ]


_ACCOUNTING = _TestAccounting()


def pytest_deselected(items):  # pragma: no cover - pytest hook
    _ACCOUNTING.deselected += len(items)


def pytest_runtest_logreport(report):  # pragma: no cover - pytest hook
    if report.when not in {"setup", "call"}:
        return
    if getattr(report, "wasxfail", False):
        if report.outcome == "skipped":
            _ACCOUNTING.xfailed += 1
        elif report.outcome == "passed":
            _ACCOUNTING.xpassed += 1
        return
    if report.outcome == "skipped":
        _ACCOUNTING.skipped += 1


def pytest_sessionfinish(session, exitstatus):  # pragma: no cover - pytest hook
    violations = _ACCOUNTING.violations()
    if not violations:
        return
    reporter = session.config.pluginmanager.get_plugin("terminalreporter")
    if reporter:
        reporter.write_sep(
            "=", f"Strict guard failed: test accounting ({', '.join(violations)})"
        )
    session.exitstatus = 1
