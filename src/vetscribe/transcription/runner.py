"""Subprocess wrapper around an ``mlx_whisper``-compatible STT binary."""

from __future__ import annotations

import asyncio
import logging
import shutil
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from vetscribe.exceptions import UpstreamError

if TYPE_CHECKING:
    from vetscribe.core.config import TranscriptionConfig

log = logging.getLogger(__name__)


@dataclass
class SttOutput:
    """What one STT invocation produced. ``text`` is empty on timeout."""

    text: str
    beam_size: int
    duration_ms: float
    exit_code: int | None = None
    timed_out: bool = False
    stderr: str = ""


@runtime_checkable
class ISttRunner(Protocol):
    """Anything that can turn an audio file into raw text at a given beam size."""

    async def run(self, audio_path: Path, *, beam_size: int) -> SttOutput: ...


def _strip_args_lines(stdout: str) -> str:
    return "\n".join(line for line in stdout.splitlines() if not line.startswith("Args:")).strip()


class WhisperRunner:
    """Runs the STT binary with a wall-clock timeout.

    On timeout the child is killed and an empty ``SttOutput`` is returned so
    the orchestrator can still score and record the run.
    """

    def __init__(self, config: TranscriptionConfig) -> None:
        self._config = config

    def _command(self, audio_path: Path, output_dir: Path, beam_size: int) -> list[str]:
        cfg = self._config
        return [
            cfg.binary,
            str(audio_path),
            "--task", "transcribe",
            "--model", cfg.model,
            "--language", cfg.language,
            "--output-format", "txt",
            "--output-dir", str(output_dir),
            "--beam-size", str(beam_size),
        ]

    async def run(self, audio_path: Path, *, beam_size: int) -> SttOutput:
        """Raises:
            UpstreamError: the binary is missing or exited non-zero without output.
        """
        work_dir = self._config.work_dir
        work_dir.mkdir(parents=True, exist_ok=True)
        # Each invocation gets a fresh output dir; artifacts never outlive their run.
        with tempfile.TemporaryDirectory(prefix=f"beam{beam_size}-", dir=work_dir) as tmp:
            return await self._run_in(audio_path, Path(tmp), beam_size)

    async def _run_in(self, audio_path: Path, output_dir: Path, beam_size: int) -> SttOutput:
        cfg = self._config
        cmd = self._command(audio_path, output_dir, beam_size)
        cmd[0] = shutil.which(cfg.binary) or cfg.binary

        started = time.perf_counter()
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            raise UpstreamError(f"STT binary not found: {cfg.binary}") from exc

        try:
            stdout_b, stderr_b = await asyncio.wait_for(
                proc.communicate(), timeout=cfg.timeout_seconds
            )
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            log.warning(
                "STT timed out after %.0fs (beam=%d); process killed", cfg.timeout_seconds, beam_size
            )
            return SttOutput(
                text="",
                beam_size=beam_size,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
                exit_code=proc.returncode,
                timed_out=True,
            )

        duration_ms = round((time.perf_counter() - started) * 1000, 1)
        stderr = stderr_b.decode("utf-8", errors="replace")
        text = _strip_args_lines(stdout_b.decode("utf-8", errors="replace"))
        if not text:
            text = self._read_artifact(output_dir, audio_path)

        # A non-zero exit with usable text still counts as a run.
        if not text and proc.returncode not in (0, None):
            raise UpstreamError(
                f"STT failed (exit={proc.returncode}): {stderr.strip()[-500:]}"
            )
        log.info(
            "STT finished (beam=%d, exit=%s, %d chars, %.0fms)",
            beam_size, proc.returncode, len(text), duration_ms,
        )
        return SttOutput(
            text=text,
            beam_size=beam_size,
            duration_ms=duration_ms,
            exit_code=proc.returncode,
            stderr=stderr[-2000:],
        )

    @staticmethod
    def _read_artifact(output_dir: Path, audio_path: Path) -> str:
        artifact = output_dir / f"{audio_path.stem}.txt"
        if artifact.exists():
            return artifact.read_text(encoding="utf-8").strip()
        return ""
