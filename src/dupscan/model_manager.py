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
Judge model files - where they live and how they get there.

The semantic judge runs a small GGUF chat model. Files go to
~/.cache/dupscan/models/ unless DUPSCAN_MODELS_DIR points elsewhere.
Nothing is downloaded implicitly; `dupscan --download-model` does it.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Dict, List
import logging
import os

logger = logging.getLogger(__name__)

MODELS_DIR_ENV = "DUPSCAN_MODELS_DIR"


@dataclass(frozen=True)
class ModelInfo:
    """A GGUF file published on the HuggingFace hub."""
    name: str
    repo_id: str
    filename: str
    size_mb: int        # Approximate download size
    purpose: str


MODELS: Dict[str, ModelInfo] = {
    "judge": ModelInfo(
        name="Qwen3-0.6B",
        repo_id="unsloth/Qwen3-0.6B-GGUF",
        filename="Qwen3-0.6B-Q4_K_M.gguf",
        size_mb=378,
        purpose="Semantic similarity verdicts and cluster pattern descriptions",
    ),
}


def get_models_dir() -> Path:
    override = os.environ.get(MODELS_DIR_ENV)
    if override:
        return Path(override)
    return Path.home() / ".cache" / "dupscan" / "models"


def get_model_path(model_key: str) -> Optional[Path]:
    """Local file of a registered model, or None if unknown or not downloaded."""
    model = MODELS.get(model_key)
    if model is None:
        return None

    path = get_models_dir() / model.filename
    return path if path.is_file() else None


def is_model_available(model_key: str) -> bool:
    return get_model_path(model_key) is not None


def download_model(
    model_key: str = "judge",
    force: bool = False,
    verbose: bool = True,
) -> Optional[Path]:
    """
    Fetch a registered model into the models directory.

    Args:
        model_key: Key into MODELS
        force: Download again even when the file is present
        verbose: Echo what is happening

    Returns:
        Path of the model file, or None when the download did not happen
    """
    def say(message: str) -> None:
        if verbose:
            print(message)

    model = MODELS.get(model_key)
    if model is None:
        say(f"   ❌ Unknown model '{model_key}'. Known: {', '.join(MODELS)}")
        return None

    existing = get_model_path(model_key)
    if existing is not None and not force:
        say(f"   ✅ {model.name} is already at {existing}")
        return existing

    try:
        from huggingface_hub import hf_hub_download
    except ImportError:
        say("   ❌ huggingface_hub is missing")
        say("   💡 Install with: pip install 'dupscan[llm]'")
        return None

    target_dir = get_models_dir()
    say(f"   📥 {model.name} (~{model.size_mb} MB) from {model.repo_id}")

    os.environ.setdefault("HF_HUB_DISABLE_TELEMETRY", "1")
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        downloaded = hf_hub_download(
            repo_id=model.repo_id,
            filename=model.filename,
            local_dir=target_dir,
        )
    except Exception as e:
        logger.warning(f"Download of {model.repo_id}/{model.filename} failed: {e}")
        say(f"   ❌ Download failed: {e}")
        return None

    say(f"   ✅ Saved to {downloaded}")
    return Path(downloaded)


def model_status_lines() -> List[str]:
    """One block of lines per registered model."""
    lines = [f"   Models directory: {get_models_dir()}", ""]

    for key, model in MODELS.items():
        path = get_model_path(key)
        if path is None:
            lines.append(f"   ❌ {model.name} [{key}] not downloaded (~{model.size_mb} MB)")
        else:
            size_mb = path.stat().st_size / (1024 * 1024)
            lines.append(f"   ✅ {model.name} [{key}] {size_mb:.1f} MB")
            lines.append(f"      {path}")
        lines.append(f"      Used for: {model.purpose}")
        lines.append("")

    return lines


def print_model_status() -> None:
    print("\n📊 Model Status\n")
    print("\n".join(model_status_lines()))
