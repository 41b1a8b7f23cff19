# dupscan - Find and rank duplicate code across a project
# Copyright (C) 2025  Jonathan Louis
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Semantic judge - asks a language model whether two blocks do the same thing.

The engine only needs `ask(prompt) -> str`. The default implementation runs
a local GGUF model through llama-cpp-python, fully offline. Any object with
an `ask` method works, e.g. a client for a hosted model.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, List, Optional, Protocol, Sequence
import contextlib
import json
import logging
import os
import threading

from .errors import JudgeUnavailableError
from .models import CodeBlock

logger = logging.getLogger(__name__)

# Characters of each block shown to the model
MAX_CODE_CHARS = 1500


class SimilarityJudge(Protocol):
    """Single-shot prompt -> free text capability."""

    def ask(self, prompt: str) -> str:
        ...


@dataclass
class SemanticJudgment:
    """Parsed answer to a similarity prompt."""
    similarity: float = 0.0
    type: str = "semantic"      # functional / algorithmic / semantic
    confidence: float = 0.0
    reasoning: str = ""
    suggestions: List[str] = field(default_factory=list)


@contextlib.contextmanager
def _suppress_stderr():
    """Suppress stderr at OS level to catch C library output like ggml Metal init."""
    stderr_fd = 2
    saved = os.dup(stderr_fd)
    try:
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, stderr_fd)
        os.close(devnull)
        yield
    finally:
        os.dup2(saved, stderr_fd)
        os.close(saved)


class LlamaJudge:
    """
    Judge backed by a local GGUF chat model.

    The model is loaded on first use. llama.cpp contexts are not thread
    safe, so calls are serialized.
    """

    def __init__(
        self,
        model_path: Optional[Path] = None,
        n_ctx: int = 8192,
        n_threads: int = 4,
        max_tokens: int = 400,
        temperature: float = 0.2,
    ):
        self.model_path = model_path
        self.n_ctx = n_ctx
        self.n_threads = n_threads
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._llm = None
        self._lock = threading.Lock()

    def ask(self, prompt: str) -> str:
        with self._lock:
            llm = self._ensure_model()
            response = llm(
                _chatml(prompt),
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                stop=["<|im_end|>", "\n\n\n"],
            )
        return response["choices"][0]["text"].strip()

    def _ensure_model(self):
        if self._llm is not None:
            return self._llm

        model_file = _find_model(self.model_path)
        if model_file is None:
            raise JudgeUnavailableError(
                "No judge model found. Download with: dupscan --download-model"
            )

        try:
            with _suppress_stderr():
                from llama_cpp import Llama
        except ImportError as e:
            raise JudgeUnavailableError(
                "llama-cpp-python not installed. Install with: pip install 'dupscan[llm]'"
            ) from e

        logger.info(f"Loading judge model: {model_file.name}")
        with _suppress_stderr():
            self._llm = Llama(
                model_path=str(model_file),
                n_ctx=self.n_ctx,
                n_threads=self.n_threads,
                n_gpu_layers=-1,  # Use GPU if available
                verbose=False,
            )
        return self._llm


def _find_model(model_path: Optional[Path]) -> Optional[Path]:
    """Find a valid model file."""
    if model_path is not None:
        if model_path.exists():
            return model_path
        logger.warning(f"Specified model path does not exist: {model_path}")

    from .model_manager import get_model_path
    return get_model_path("judge")


def _chatml(user_message: str) -> str:
    # /no_think keeps Qwen3 from spending the token budget on reasoning
    return (
        "<|im_start|>system\nYou are a senior developer reviewing code for "
        "duplication. Answer exactly as asked. /no_think\n<|im_end|>\n"
        f"<|im_start|>user\n{user_message}\n<|im_end|>\n"
        "<|im_start|>assistant\n"
    )


def _clip(code: str) -> str:
    if len(code) <= MAX_CODE_CHARS:
        return code
    return code[:MAX_CODE_CHARS] + "\n// ... (truncated)"


def build_similarity_prompt(block1: CodeBlock, block2: CodeBlock) -> str:
    """Prompt asking for a JSON similarity verdict on two blocks."""
    return (
        "Compare these two code blocks for semantic similarity:\n\n"
        f"Block 1 ({block1.file_path}):\n```\n{_clip(block1.code)}\n```\n\n"
        f"Block 2 ({block2.file_path}):\n```\n{_clip(block2.code)}\n```\n\n"
        "Analyze:\n"
        "1. Functional similarity (do they accomplish the same thing?)\n"
        "2. Algorithmic similarity (similar approach/logic?)\n"
        "3. Semantic similarity (similar meaning/purpose?)\n\n"
        "Return a JSON object with:\n"
        "{\n"
        '  "similarity": 0.0-1.0,\n'
        '  "type": "functional|algorithmic|semantic",\n'
        '  "confidence": 0.0-1.0,\n'
        '  "reasoning": "explanation",\n'
        '  "suggestions": ["suggestion1", "suggestion2"]\n'
        "}"
    )


def build_pattern_prompt(codes: Sequence[str]) -> str:
    """Prompt asking for a short description of what the blocks share."""
    parts = ["Analyze these code blocks and extract the common pattern:\n"]
    for i, code in enumerate(codes):
        parts.append(f"Block {i+1}:\n```\n{_clip(code)}\n```\n")
    parts.append(
        "Identify the common algorithmic or structural pattern and describe it concisely."
    )
    return "\n".join(parts)


def extract_json_object(output: str) -> Optional[Dict[str, Any]]:
    """
    Pull the first JSON object out of free-form model output.

    Handles Qwen3 think blocks, markdown code fences and prose around
    the object. Returns None when nothing parses.
    """
    raw = output.strip()

    # Handle Qwen3 /think mode - keep content after </think>
    if "</think>" in raw:
        raw = raw.split("</think>")[-1].strip()

    if "```json" in raw:
        start = raw.index("```json") + 7
        end = raw.index("```", start) if "```" in raw[start:] else len(raw)
        raw = raw[start:end].strip()
    elif "```" in raw:
        start = raw.index("```") + 3
        end = raw.index("```", start) if "```" in raw[start:] else len(raw)
        raw = raw[start:end].strip()

    if "{" not in raw:
        return None

    start = raw.index("{")
    depth = 0
    end = len(raw)
    for i, c in enumerate(raw[start:], start):
        if c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
            if depth == 0:
                end = i + 1
                break

    try:
        data = json.loads(raw[start:end])
    except (json.JSONDecodeError, ValueError, RecursionError):
        return None

    return data if isinstance(data, dict) else None


def parse_similarity_response(output: str) -> SemanticJudgment:
    """
    Parse a similarity verdict.

    Anything unusable becomes a zero-similarity judgment, which the
    semantic pass treats as "no match".
    """
    if not isinstance(output, str):
        return SemanticJudgment()

    data = extract_json_object(output)
    if data is None:
        return SemanticJudgment()

    suggestions = data.get("suggestions") or []
    if isinstance(suggestions, str):
        suggestions = [suggestions]
    elif not isinstance(suggestions, list):
        suggestions = []

    return SemanticJudgment(
        similarity=_unit_float(data.get("similarity")),
        type=str(data.get("type") or "semantic").strip().lower(),
        confidence=_unit_float(data.get("confidence")),
        reasoning=str(data.get("reasoning") or ""),
        suggestions=[str(s) for s in suggestions if str(s).strip()],
    )


def _unit_float(value: Any) -> float:
    """Coerce to a float in [0, 1]; junk becomes 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if number != number:  # NaN
        return 0.0
    return min(max(number, 0.0), 1.0)
