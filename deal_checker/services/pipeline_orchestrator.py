# deal_checker/services/pipeline_orchestrator.py

"""Orchestrates dedup → batch → throttle → fetch → normalize → persist."""

import asyncio
import importlib
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from deal_checker.config.settings import Settings
from deal_checker.errors import PersistenceError, PipelineError
from deal_checker.filters.batcher import chunk
from deal_checker.filters.deduplicator import ListingDeduplicator
from deal_checker.models.deal import DealRecord
from deal_checker.models.listing import IdentifierRegistry
from deal_checker.models.raw_item import RawItem
from deal_checker.providers.base_provider import BaseProvider
from deal_checker.services.rate_limiter import RateLimiter
from deal_checker.services.result_normalizer import ResultNormalizer
from deal_checker.storage.file_manager import FileManager

logger = logging.getLogger("deal_checker.orchestrator")


class PipelineStage(str, Enum):
    """Per-source pipeline states."""

    IDLE = "idle"
    DEDUP = "dedup"
    BATCHING = "batching"
    THROTTLE = "throttle"
    FETCH = "fetch"
    NORMALIZE = "normalize"
    PERSIST = "persist"
    AGGREGATE = "aggregate"
    DONE = "done"
    FAILED = "failed"


@dataclass
class SourceReport:
    """What happened to one input file."""

    source: Path
    unique_asins: int = 0
    duplicates: int = 0
    unresolved: int = 0
    batches: int = 0
    records: int = 0
    missing: int = 0
    files: list[Path] = field(default_factory=lambda: list[Path]())


@dataclass
class RunResult:
    """Container for a completed run across all input files."""

    records: list[DealRecord] = field(
        default_factory=lambda: list[DealRecord]()
    )
    sources: list[SourceReport] = field(
        default_factory=lambda: list[SourceReport]()
    )
    deals_path: Path | None = None


def rank_deals(records: list[DealRecord]) -> list[DealRecord]:
    """Sort by discount percentage, highest first; absent counts as 0.

    At an equal percentage a known value ranks above an absent one;
    otherwise ``sorted`` is stable and equal keys keep their input order.
    """
    return sorted(records, key=lambda r: r.sort_key, reverse=True)


def _load_provider_class(dotted_path: str) -> type[Any]:
    """Dynamically import a provider class from its dotted module path."""
    module_path, class_name = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    cls: type[Any] = getattr(module, class_name)
    return cls


class PipelineOrchestrator:
    """Runs every input file through one provider, strictly sequentially.

    A single RateLimiter instance spans the whole run.  Any fetch or
    persist failure aborts the run; batch files already written stay
    on disk.
    """

    def __init__(
        self,
        provider: BaseProvider,
        rate_limiter: RateLimiter,
        file_manager: FileManager,
        batch_size: int,
        normalizer: ResultNormalizer | None = None,
        passthrough_unresolved: bool = False,
        save_images: bool = False,
    ) -> None:
        self.provider = provider
        self.rate_limiter = rate_limiter
        self.file_manager = file_manager
        self.batch_size = batch_size
        self.normalizer = normalizer or ResultNormalizer(
            Settings.AFFILIATE_TAG, Settings.AFFILIATE_DOMAIN
        )
        self.passthrough_unresolved = passthrough_unresolved
        self.save_images = save_images
        self.stage = PipelineStage.IDLE

    @classmethod
    def from_settings(
        cls,
        provider_id: str,
        file_manager: FileManager,
        save_images: bool = False,
    ) -> "PipelineOrchestrator":
        """Build an orchestrator for a registered provider id.

        Raises:
            ConfigurationError: Unknown provider or missing credentials.
        """
        entry = Settings.get_provider(provider_id)
        Settings.require_credentials(provider_id)
        provider_cls = _load_provider_class(entry["provider"])
        return cls(
            provider=provider_cls(),
            rate_limiter=RateLimiter(float(entry["interval"])),
            file_manager=file_manager,
            batch_size=int(entry["batch_size"]),
            passthrough_unresolved=provider_id == "page",
            save_images=save_images,
        )

    # ── Private helpers ──────────────────────────────────

    def _enter(self, stage: PipelineStage, source: Path) -> None:
        self.stage = stage
        logger.debug("[%s] → %s", source.name, stage.value)

    def _fail(
        self, stage: PipelineStage, source: Path, exc: BaseException,
    ) -> PipelineError:
        self.stage = PipelineStage.FAILED
        logger.error(
            "%s failed for %s: %s",
            stage.value.upper(),
            source.name,
            exc,
            exc_info=exc,
        )
        return PipelineError(stage.value, source.name, exc)

    def _dedup(self, source: Path) -> IdentifierRegistry:
        references = self.file_manager.read_references(source)
        registry = ListingDeduplicator.build_registry(references)

        if registry.duplicates:
            logger.warning("Duplicates found in %s:", source.name)
            for dup in registry.duplicates:
                logger.warning(
                    "  - ASIN %s appears on lines %d and %d",
                    dup.asin,
                    dup.line1,
                    dup.line2,
                )
        for ref in registry.unresolved:
            logger.warning(
                "No ASIN found on line %d of %s: %s",
                ref.line,
                source.name,
                ref.url,
            )
        return registry

    async def _capture_image(
        self,
        source: Path,
        index: int,
        record: DealRecord,
    ) -> str | None:
        """Download the record's image URL, returning the local path."""
        if not record.image or not record.image.startswith("http"):
            return None
        data = await asyncio.to_thread(
            self.provider.fetch_image, record.image
        )
        if not data:
            return None
        suffix = Path(record.image.split("?", 1)[0]).suffix or ".jpg"
        path = self.file_manager.save_image(
            source, index, record.asin, data, suffix
        )
        return str(path)

    async def _normalize_batch(
        self,
        source: Path,
        registry: IdentifierRegistry,
        items: list[RawItem],
        start: int,
    ) -> list[DealRecord]:
        records: list[DealRecord] = []
        for offset, item in enumerate(items):
            reference = registry.link_for(item.asin)
            record = self.normalizer.normalize(item, reference)
            if self.save_images:
                local = await self._capture_image(
                    source, start + offset, record
                )
                if local is not None:
                    record = self.normalizer.normalize(
                        item, reference, image=local
                    )
            records.append(record)
        return records

    # ── Per-source pipeline ──────────────────────────────

    async def process_source(
        self, source: Path,
    ) -> tuple[list[DealRecord], SourceReport]:
        """Run one input file through the pipeline.

        Raises:
            PipelineError: On any fetch or persist failure.
        """
        report = SourceReport(source=source)
        records: list[DealRecord] = []

        self._enter(PipelineStage.DEDUP, source)
        try:
            registry = self._dedup(source)
        except (OSError, UnicodeDecodeError) as exc:
            raise self._fail(PipelineStage.DEDUP, source, exc) from exc
        report.unique_asins = len(registry)
        report.duplicates = len(registry.duplicates)
        report.unresolved = len(registry.unresolved)

        if self.passthrough_unresolved:
            records.extend(
                ResultNormalizer.passthrough(ref.url)
                for ref in registry.unresolved
            )

        if not registry.asins:
            logger.warning("No valid ASINs found in %s.", source.name)
            self._enter(PipelineStage.DONE, source)
            report.records = len(records)
            return records, report

        self._enter(PipelineStage.BATCHING, source)
        batches = chunk(registry.asins, self.batch_size)
        report.batches = len(batches)
        logger.info(
            "%s: %d unique ASIN(s) → %d batch(es)",
            source.name,
            len(registry),
            len(batches),
        )

        processed = 0
        for number, batch in enumerate(batches, 1):
            start = processed + 1
            end = processed + len(batch)
            logger.info(
                "%s: batch %d/%d, ASINs %d-%d",
                source.name,
                number,
                len(batches),
                start,
                end,
            )

            self._enter(PipelineStage.THROTTLE, source)
            await self.rate_limiter.acquire()

            self._enter(PipelineStage.FETCH, source)
            try:
                items = await asyncio.to_thread(
                    self.provider.fetch_batch, batch
                )
            except Exception as exc:
                raise self._fail(PipelineStage.FETCH, source, exc) from exc
            report.missing += max(len(batch) - len(items), 0)

            self._enter(PipelineStage.NORMALIZE, source)
            try:
                batch_records = await self._normalize_batch(
                    source, registry, items, start
                )
            except Exception as exc:
                stage = (
                    PipelineStage.PERSIST
                    if isinstance(exc, PersistenceError)
                    else PipelineStage.NORMALIZE
                )
                raise self._fail(stage, source, exc) from exc

            self._enter(PipelineStage.PERSIST, source)
            try:
                path = self.file_manager.save_batch(
                    source, start, end, batch_records
                )
            except Exception as exc:
                raise self._fail(PipelineStage.PERSIST, source, exc) from exc
            report.files.append(path)
            records.extend(batch_records)
            processed += len(batch)

        report.records = len(records)
        self._enter(PipelineStage.DONE, source)
        logger.info(
            "Finished %s, output: %s",
            source.name,
            self.file_manager.source_dir(source),
        )
        return records, report

    # ── Run entry point ──────────────────────────────────

    async def run(self, input_files: list[Path]) -> RunResult:
        """Process every input file, then rank and persist all records.

        The output root is wiped and recreated first.

        Raises:
            PipelineError: The first fatal failure; the run stops there.
        """
        result = RunResult()
        try:
            self.file_manager.reset_output_root()
        except Exception as exc:
            raise self._fail(
                PipelineStage.PERSIST, self.file_manager.output_root, exc
            ) from exc

        for source in input_files:
            self.stage = PipelineStage.IDLE
            records, report = await self.process_source(source)
            result.records.extend(records)
            result.sources.append(report)

        aggregate_source = self.file_manager.output_root
        self._enter(PipelineStage.AGGREGATE, aggregate_source)
        result.records = rank_deals(result.records)
        try:
            result.deals_path = self.file_manager.save_deals(
                result.records
            )
        except Exception as exc:
            raise self._fail(
                PipelineStage.PERSIST, aggregate_source, exc
            ) from exc

        self._enter(PipelineStage.DONE, aggregate_source)
        return result
