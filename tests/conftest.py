"""Shared test fixtures - in-memory file access and a scripted judge."""

import threading
import time
from typing import Callable, Dict, Iterable, Optional, Union

import pytest

from dupscan.hashing import calculate_hash, tokenize
from dupscan.models import CodeBlock


class FakeFileAccess:
    """Project files held in a dict; some paths can be made unreadable.

    Set `release` to a threading.Event to make listing block until the
    event is set. `entered` is set as soon as listing starts.
    """

    def __init__(
        self,
        files: Optional[Dict[str, str]] = None,
        unreadable: Iterable[str] = (),
        list_error: Optional[Exception] = None,
    ):
        self.files = dict(files or {})
        self.unreadable = set(unreadable)
        self.list_error = list_error
        self.entered = threading.Event()
        self.release: Optional[threading.Event] = None
        self.reads = []

    def list_project_text_files(self, project_path: str):
        self.entered.set()
        if self.release is not None:
            self.release.wait(timeout=5)
        if self.list_error is not None:
            raise self.list_error
        return list(self.files)

    def read_text_file(self, path: str) -> str:
        self.reads.append(path)
        if path in self.unreadable:
            raise PermissionError(f"Permission denied: {path}")
        return self.files[path]


class FakeJudge:
    """Returns a canned answer (or the result of a callable) and records prompts."""

    def __init__(
        self,
        response: Union[str, Callable[[str], str]] = "{}",
        error: Optional[Exception] = None,
        delay: float = 0.0,
    ):
        self.response = response
        self.error = error
        self.delay = delay
        self.prompts = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def ask(self, prompt: str) -> str:
        with self._lock:
            self.prompts.append(prompt)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            if self.error is not None:
                raise self.error
            if callable(self.response):
                return self.response(prompt)
            return self.response
        finally:
            with self._lock:
                self.in_flight -= 1


def make_block(file_path: str, code: str, start_line: int = 1) -> CodeBlock:
    return CodeBlock(
        file_path=file_path,
        start_line=start_line,
        end_line=start_line + code.count("\n"),
        code=code,
        hash=calculate_hash(code),
        tokens=tuple(tokenize(code)),
    )


SUM_PRICES = """function sumPrices(items) {
  let total = 0;
  for (const item of items) {
    total += item.price * item.quantity;
  }
  return total;
}"""

# Same body, different name: 11 of 13 distinct tokens shared
SUM_COSTS = SUM_PRICES.replace("sumPrices", "sumCosts")

ALPHA = """function alpha() {
  console.log("x");
}"""

BETA = """const beta = () => {
  process.exit(2);
}"""


@pytest.fixture
def block_factory():
    return make_block


@pytest.fixture
def identical_project():
    return FakeFileAccess({"a.ts": SUM_PRICES, "b.ts": SUM_PRICES})


@pytest.fixture
def renamed_project():
    return FakeFileAccess({"a.ts": SUM_PRICES, "b.ts": SUM_COSTS})


@pytest.fixture
def unrelated_project():
    return FakeFileAccess({"a.ts": ALPHA, "b.ts": BETA})
