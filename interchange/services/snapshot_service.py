"""
Database snapshot replacement service

A request moves through four states:
- received: the uploaded file is written to the staging path and checked
  to be a readable SQLite database
- detached: the engine pool is disposed so no handle holds the live file
- replacing: a supervisor swaps the live file (and may restart the service)
- reported: outcome returned, or converted to an external_procedure error
"""
import asyncio
import logging
import shutil
import subprocess
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import aiofiles
from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from interchange.config import settings
from interchange.database import detach_engine, reattach_engine
from interchange.utils.cache import cache_service
from interchange.utils.errors import InterchangeError

logger = logging.getLogger(__name__)

SQLITE_HEADER = b"SQLite format 3\x00"


@dataclass
class ReplaceOutcome:
    """Result of a supervisor run"""
    exit_status: int
    stdout: str = ""
    stderr: str = ""

    @property
    def succeeded(self) -> bool:
        return self.exit_status == 0

    def diagnostic(self) -> str:
        text = (self.stderr or "").strip() or (self.stdout or "").strip()
        return text or f"exit status {self.exit_status}"


class SnapshotSupervisor(ABC):
    """Out-of-process contract: stop the service, swap the file, start it again"""

    # Whether a successful run restarts the serving process
    restarts_service = True

    @abstractmethod
    def replace_and_restart(self, staged_path: Path) -> ReplaceOutcome:
        ...


class ScriptSupervisor(SnapshotSupervisor):
    """
    Runs an operator-provided replace script with the staged file path

    The script is looked up in the working directory, then in its parent.
    The interpreter is chosen from the script extension.
    """

    def __init__(self, script: str, working_dir: Path, timeout: Optional[int] = None):
        self.script = script
        self.working_dir = Path(working_dir)
        self.timeout = timeout

    def locate_script(self) -> Path:
        candidates = [Path(self.script)] if Path(self.script).is_absolute() else [
            self.working_dir / self.script,
            self.working_dir.parent / self.script,
        ]
        for candidate in candidates:
            if candidate.is_file():
                return candidate
        raise FileNotFoundError(
            f"Replace script not found at {', '.join(str(c) for c in candidates)}"
        )

    @staticmethod
    def build_command(script: Path, staged_path: Path) -> List[str]:
        suffix = script.suffix.lower()
        if suffix == ".ps1":
            shell = "powershell.exe" if sys.platform == "win32" else "pwsh"
            return [shell, "-ExecutionPolicy", "Bypass", "-File", str(script), str(staged_path)]
        if suffix in (".cmd", ".bat"):
            return ["cmd", "/c", str(script), str(staged_path)]
        if suffix == ".sh":
            return ["sh", str(script), str(staged_path)]
        if suffix == ".py":
            return [sys.executable, str(script), str(staged_path)]
        return [str(script), str(staged_path)]

    def replace_and_restart(self, staged_path: Path) -> ReplaceOutcome:
        script = self.locate_script()
        command = self.build_command(script, staged_path)
        logger.info(f"Running replace script: {' '.join(command)}")

        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
            timeout=self.timeout,
            cwd=str(self.working_dir),
        )
        return ReplaceOutcome(result.returncode, result.stdout, result.stderr)


class InProcessSupervisor(SnapshotSupervisor):
    """Copies the staged file over the live one without restarting"""

    restarts_service = False

    def __init__(self, live_path: Path):
        self.live_path = Path(live_path)

    def replace_and_restart(self, staged_path: Path) -> ReplaceOutcome:
        logger.info(f"Replacing {self.live_path} with {staged_path}")
        self.live_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(staged_path, self.live_path)
        Path(staged_path).unlink(missing_ok=True)
        return ReplaceOutcome(0)


class SnapshotService:
    """Serializes snapshot replacements and drives the state machine"""

    def __init__(self):
        self._lock = asyncio.Lock()

    async def replace(
        self,
        content: bytes,
        supervisor: SnapshotSupervisor,
        staging_path: Optional[Path] = None,
    ) -> ReplaceOutcome:
        """
        Replace the live database with the uploaded snapshot

        Raises:
            InterchangeError: snapshot_in_progress (409) when another
                replacement is running, staging_failed when the upload
                cannot be written, invalid_archive when it is not a readable
                SQLite database, external_procedure when the supervisor
                fails
        """
        if self._lock.locked():
            raise InterchangeError(
                "snapshot_in_progress",
                "A database replacement is already running",
                status_code=409,
            )

        async with self._lock:
            staging_path = staging_path or settings.resolve(settings.SNAPSHOT_STAGING_FILE)
            await self._stage(content, staging_path)
            self._verify(staging_path)

            detach_engine()

            try:
                outcome = supervisor.replace_and_restart(staging_path)
            except (OSError, subprocess.SubprocessError) as e:
                self._recover()
                logger.error(f"Database replacement failed: {str(e)}")
                raise InterchangeError("external_procedure", f"Database replacement failed: {e}")

            if not outcome.succeeded:
                self._recover()
                logger.error(f"Database replacement exited with {outcome.exit_status}: {outcome.diagnostic()}")
                raise InterchangeError(
                    "external_procedure",
                    f"Database replacement failed: {outcome.diagnostic()}",
                )

            cache_service.clear()
            if not supervisor.restarts_service:
                try:
                    reattach_engine()
                except SQLAlchemyError as e:
                    logger.error(f"Replaced database is not usable: {str(e)}")
                    raise InterchangeError("external_procedure", f"Replaced database is not usable: {e}")

            logger.info("Database snapshot replaced")
            return outcome

    async def _stage(self, content: bytes, staging_path: Path) -> None:
        try:
            staging_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(staging_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            raise InterchangeError("staging_failed", f"Cannot save the imported file: {e}")
        logger.info(f"Staged {len(content)} bytes at {staging_path}")

    @staticmethod
    def _verify(staged_path: Path) -> None:
        """Reject a staged file that is not a readable SQLite database"""
        with open(staged_path, "rb") as f:
            header = f.read(len(SQLITE_HEADER))
        if header != SQLITE_HEADER:
            raise InterchangeError("invalid_archive", "The uploaded file is not a SQLite database")

        check_engine = create_engine(f"sqlite:///{Path(staged_path).as_posix()}", poolclass=NullPool)
        try:
            with check_engine.connect() as conn:
                result = conn.execute(text("PRAGMA quick_check")).scalar()
        except SQLAlchemyError as e:
            raise InterchangeError("invalid_archive", f"The uploaded database cannot be read: {e}")
        finally:
            check_engine.dispose()

        if result != "ok":
            raise InterchangeError("invalid_archive", f"The uploaded database is damaged: {result}")

    @staticmethod
    def _recover() -> None:
        try:
            reattach_engine()
        except SQLAlchemyError as e:
            logger.error(f"Could not reattach database engine: {str(e)}")


def get_script_supervisor() -> SnapshotSupervisor:
    """Default supervisor for /import/db, built from settings"""
    return ScriptSupervisor(
        settings.SNAPSHOT_SCRIPT,
        Path(settings.WORKING_DIR).resolve(),
        timeout=settings.SNAPSHOT_SCRIPT_TIMEOUT,
    )


def get_in_process_supervisor() -> SnapshotSupervisor:
    return InProcessSupervisor(settings.database_path)


# Global instance
snapshot_service = SnapshotService()
