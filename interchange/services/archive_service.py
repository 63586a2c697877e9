"""
Archive service: directory <-> zip stream

Packing streams entries chunk by chunk so an archive is never held in
memory as a whole. Unpacking writes entries concurrently with a bounded
number of in-flight writes.
"""
import asyncio
import io
import logging
import zipfile
from pathlib import Path, PurePosixPath
from typing import Iterator, List

import aiofiles

from interchange.utils.errors import InterchangeError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class _ChunkSink:
    """
    Write-only file object collecting zip output between drains

    It has no tell()/seek(), so zipfile falls back to streaming mode and
    writes data descriptors after each entry.
    """

    def __init__(self):
        self._chunks: List[bytes] = []

    def write(self, data) -> int:
        if data:
            self._chunks.append(bytes(data))
        return len(data)

    def flush(self):
        pass

    def drain(self) -> bytes:
        data = b"".join(self._chunks)
        self._chunks.clear()
        return data


class ArchiveService:
    """Service for packing and unpacking loose file directories"""

    def __init__(self, chunk_size: int = CHUNK_SIZE):
        self.chunk_size = chunk_size

    def list_files(self, directory: Path) -> List[Path]:
        if not directory.is_dir():
            return []
        return sorted(p for p in directory.rglob("*") if p.is_file())

    def iter_directory_zip(self, directory: Path) -> Iterator[bytes]:
        """
        Yield a zip archive of every file under `directory`

        Entry names are relative to the directory itself. A missing
        directory produces a valid, empty archive.
        """
        directory = Path(directory)
        if not directory.is_dir():
            logger.warning(f"Archive source {directory} does not exist, sending empty archive")

        files = self.list_files(directory)
        sink = _ChunkSink()

        with zipfile.ZipFile(sink, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
            for path in files:
                arcname = path.relative_to(directory).as_posix()
                with open(path, "rb") as src, zf.open(arcname, "w") as dst:
                    while True:
                        chunk = src.read(self.chunk_size)
                        if not chunk:
                            break
                        dst.write(chunk)
                        data = sink.drain()
                        if data:
                            yield data
                data = sink.drain()
                if data:
                    yield data

        # central directory
        data = sink.drain()
        if data:
            yield data

        logger.info(f"Archived {len(files)} files from {directory}")

    async def extract_zip(self, content: bytes, destination: Path, concurrency: int = 5) -> int:
        """
        Extract an uploaded zip into `destination`

        Returns:
            Number of files written

        Raises:
            InterchangeError: invalid_archive if the archive is corrupt, an
                entry escapes the destination, or a write fails. Entries
                written before the failure stay on disk.
        """
        destination = Path(destination)
        try:
            destination.mkdir(parents=True, exist_ok=True)
            archive = zipfile.ZipFile(io.BytesIO(content))
        except zipfile.BadZipFile as e:
            raise InterchangeError("invalid_archive", f"Invalid zip archive: {e}")
        except OSError as e:
            raise InterchangeError("invalid_archive", f"Cannot create {destination}: {e}")

        root = destination.resolve()
        semaphore = asyncio.Semaphore(max(concurrency, 1))

        async def write_entry(info: zipfile.ZipInfo, target: Path):
            async with semaphore:
                data = archive.read(info)
                target.parent.mkdir(parents=True, exist_ok=True)
                async with aiofiles.open(target, "wb") as f:
                    await f.write(data)

        with archive:
            entries = []
            for info in archive.infolist():
                target = self._entry_target(root, info.filename)
                if info.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                else:
                    entries.append((info, target))

            tasks = [write_entry(info, target) for info, target in entries]
            results = await asyncio.gather(*tasks, return_exceptions=True)

        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            logger.error(
                f"Zip extraction into {destination} failed for {len(failures)} of {len(tasks)} entries"
            )
            raise InterchangeError(
                "invalid_archive",
                f"Extraction failed for {len(failures)} entries: {failures[0]}",
            )

        logger.info(f"Extracted {len(tasks)} files into {destination}")
        return len(tasks)

    @staticmethod
    def _entry_target(root: Path, name: str) -> Path:
        parts = PurePosixPath(name.replace("\\", "/")).parts
        target = root.joinpath(*parts).resolve() if parts else root
        if target != root and root not in target.parents:
            raise InterchangeError("invalid_archive", f"Archive entry escapes destination: {name}")
        return target


# Global instance
archive_service = ArchiveService()
