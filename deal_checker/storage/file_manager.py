# deal_checker/storage/file_manager.py

"""Reads input lists and writes batch/aggregate results to disk."""

import json
import logging
import shutil
from pathlib import Path

from deal_checker.config.settings import Settings
from deal_checker.errors import ConfigurationError, PersistenceError
from deal_checker.models.deal import DealRecord

logger = logging.getLogger("deal_checker.storage")


class FileManager:
    """Handles the input directory and the (non-incremental) output root."""

    def __init__(
        self,
        input_dir: Path | None = None,
        output_root: Path | None = None,
    ) -> None:
        self.input_dir: Path = input_dir or Settings.INPUT_DIR
        self.output_root: Path = output_root or Settings.OUTPUT_ROOT
        logger.debug(
            "FileManager initialised, input_dir=%s output_root=%s",
            self.input_dir,
            self.output_root,
        )

    # ── Input ────────────────────────────────────────────

    def list_input_files(
        self, selected: list[str] | None = None,
    ) -> list[Path]:
        """Return the ``.txt`` files to process, sorted by name.

        When *selected* is non-empty only those file names
        (case-insensitive) are returned.
        """
        if not self.input_dir.is_dir():
            raise ConfigurationError(
                f'Input directory "{self.input_dir}" not found'
            )
        files = sorted(
            p
            for p in self.input_dir.iterdir()
            if p.is_file() and p.suffix.lower() == ".txt"
        )
        if selected:
            wanted = {name.lower() for name in selected}
            files = [p for p in files if p.name.lower() in wanted]
        return files

    @staticmethod
    def read_references(path: Path) -> list[str]:
        """Read one listing reference per line, dropping blank lines."""
        text = path.read_text(encoding="utf-8")
        return [line.strip() for line in text.splitlines() if line.strip()]

    # ── Output ───────────────────────────────────────────

    def reset_output_root(self) -> Path:
        """Delete any previous run's output and recreate the root."""
        try:
            if self.output_root.exists():
                shutil.rmtree(self.output_root)
                logger.info("Removed existing %s", self.output_root)
            self.output_root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError(
                f"Could not reset {self.output_root}: {exc}"
            ) from exc
        logger.info("Created fresh %s", self.output_root)
        return self.output_root

    def source_dir(self, source: Path) -> Path:
        """Per-source output directory named after the input's base name."""
        return self.output_root / source.stem

    def _write_json(self, filepath: Path, records: list[DealRecord]) -> Path:
        if filepath.exists():
            logger.info("Overwriting existing file: %s", filepath)
        try:
            filepath.parent.mkdir(parents=True, exist_ok=True)
            with open(filepath, "w", encoding="utf-8") as f:
                json.dump(
                    [r.to_dict() for r in records],
                    f,
                    ensure_ascii=False,
                    indent=2,
                )
        except OSError as exc:
            raise PersistenceError(
                f"Failed to write {filepath}: {exc}"
            ) from exc
        logger.info("Saved %s (%d items)", filepath, len(records))
        return filepath

    def save_batch(
        self,
        source: Path,
        start: int,
        end: int,
        records: list[DealRecord],
    ) -> Path:
        """Write one batch as ``<base><start>-<end>.json``."""
        filename = f"{source.stem}{start}-{end}.json"
        return self._write_json(self.source_dir(source) / filename, records)

    def save_deals(self, records: list[DealRecord]) -> Path:
        """Write the aggregated, ranked deals file in the output root."""
        return self._write_json(
            self.output_root / Settings.DEALS_FILENAME, records
        )

    def save_image(
        self,
        source: Path,
        index: int,
        asin: str | None,
        data: bytes,
        suffix: str = ".jpg",
    ) -> Path:
        """Store a product image as ``images/<index>-<ASIN><suffix>``."""
        filepath = (
            self.source_dir(source)
            / "images"
            / f"{index}-{asin or 'noasin'}{suffix}"
        )
        try:
            filepath.parent.mkdir(parents=True, exist_ok=True)
            filepath.write_bytes(data)
        except OSError as exc:
            raise PersistenceError(
                f"Failed to write {filepath}: {exc}"
            ) from exc
        logger.debug("Saved image %s (%d bytes)", filepath, len(data))
        return filepath
