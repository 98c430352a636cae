#!/usr/bin/env python3
"""
alienshot Pipeline - applies every filter look to one capture.

Job flow:
1. Guards: path given, file exists, file fully transferred, file decodes
2. Each FilterRecipe runs on its own clone of the decoded buffer and is
   written to `<edited_dir>/<stem>-<look><ext>`; a failing look is recorded
   and the remaining looks still run
3. If at least one look was written, the original moves to the archive
   directory; otherwise it stays where it is

`PhotoPipeline.process()` always returns a ProcessingReport.
"""

import logging
import os
import shutil
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from .config import PipelineConfig
from .errors import FilterError, InputError, OutputError, RelocationWarning
from .filters import FilterPipeline
from .image_buffer import ImageBuffer
from .io_utils import ImageCodec
from .recipes import FilterRecipe, list_recipes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceAsset:
    """A capture on disk, as seen when the job starts."""

    path: Path
    size: int
    exists: bool

    @classmethod
    def from_path(cls, path: str | Path) -> "SourceAsset":
        path = Path(path)
        try:
            size = path.stat().st_size if path.is_file() else 0
        except OSError:
            return cls(path=path, size=0, exists=False)
        return cls(path=path, size=size, exists=path.is_file())

    @property
    def stem(self) -> str:
        return self.path.stem

    @property
    def suffix(self) -> str:
        return self.path.suffix


@dataclass(frozen=True)
class FilterOutcome:
    """Result of one filter look."""

    variant: str
    success: bool
    output_path: Path | None = None
    error: Exception | None = None

    @property
    def error_kind(self) -> str | None:
        if self.error is None:
            return None
        return type(self.error).__name__

    def as_dict(self) -> dict:
        data = {"variant": self.variant, "success": self.success}
        if self.success:
            data["output_path"] = str(self.output_path)
        else:
            data["error_kind"] = self.error_kind
            data["error"] = str(self.error)
        return data


@dataclass
class ProcessingReport:
    """
    Everything a job produced.

    `attempted` is the number of looks the job was configured with, also when
    a guard rejected the source (`error` set, no outcomes).
    """

    source: Path | None
    attempted: int = 0
    outcomes: list[FilterOutcome] = field(default_factory=list)
    error: InputError | None = None
    archived_path: Path | None = None
    relocation_error: RelocationWarning | None = None

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)

    @property
    def success(self) -> bool:
        return self.error is None and self.succeeded >= 1

    @property
    def output_paths(self) -> list[Path]:
        return [o.output_path for o in self.outcomes if o.success and o.output_path]

    def as_dict(self) -> dict:
        return {
            "source": str(self.source) if self.source else None,
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "success": self.success,
            "error": str(self.error) if self.error else None,
            "archived_path": str(self.archived_path) if self.archived_path else None,
            "relocation_error": str(self.relocation_error) if self.relocation_error else None,
            "outcomes": [o.as_dict() for o in self.outcomes],
        }


class PhotoPipeline:
    """Orchestrates the filter looks for one source file per call."""

    def __init__(
        self,
        config: PipelineConfig | None = None,
        recipes: Sequence[FilterRecipe] | None = None,
        codec: ImageCodec | None = None,
        filter_pipeline: FilterPipeline | None = None,
    ):
        self.config = config or PipelineConfig()
        self.recipes = list(recipes) if recipes is not None else list_recipes()
        self.codec = codec or ImageCodec()
        self.filter_pipeline = filter_pipeline or FilterPipeline()

    def process(self, source_path: str | Path | None) -> ProcessingReport:
        """
        Run every filter look on one capture.

        Args:
            source_path: Path of the capture

        Returns:
            ProcessingReport; never raises for bad input or failing looks
        """
        logger.info(f"Starting processing of {source_path}")

        try:
            asset = self.check_source(source_path)
            image = self.load_source(asset)
        except InputError as e:
            logger.error(f"Rejected {source_path}: {e}")
            source = Path(source_path) if source_path else None
            return ProcessingReport(source=source, attempted=len(self.recipes), error=e)

        if self.config.create_dirs:
            try:
                self.config.ensure_dirs()
            except OSError as e:
                logger.error(f"Could not create output directories: {e}")

        report = ProcessingReport(source=asset.path, attempted=len(self.recipes))
        report.outcomes = self._run_filters(image, asset)

        logger.info(
            f"Summary: {report.succeeded}/{report.attempted} filters applied "
            f"for {asset.path.name}"
        )

        if report.succeeded > 0:
            self._relocate(asset, report)
        else:
            logger.error(f"No filter could be applied, leaving {asset.path} in place")

        return report

    # Guards

    def check_source(self, source_path: str | Path | None) -> SourceAsset:
        """
        Validate the source file before decoding.

        Raises:
            InputError: missing path, not found or incomplete transfer
        """
        if source_path is None or not str(source_path).strip():
            raise InputError(InputError.MISSING_PATH)

        try:
            path = Path(source_path).expanduser().resolve()
        except (OSError, RuntimeError, ValueError) as e:
            raise InputError(InputError.MISSING_PATH, source_path, str(e)) from e

        asset = SourceAsset.from_path(path)
        if not asset.exists:
            raise InputError(InputError.NOT_FOUND, path)

        logger.info(f"File size: {asset.size / 1024:.1f} KB")
        if asset.size < self.config.min_file_size:
            raise InputError(
                InputError.INCOMPLETE_TRANSFER,
                path,
                f"{asset.size} bytes < {self.config.min_file_size}",
            )
        return asset

    def load_source(self, asset: SourceAsset) -> ImageBuffer:
        """
        Decode the source once.

        Raises:
            InputError: decode failure
        """
        try:
            image = self.codec.decode(asset.path)
        except (OSError, ValueError) as e:
            raise InputError(InputError.DECODE_FAILURE, asset.path, str(e)) from e

        if image is None:
            raise InputError(InputError.DECODE_FAILURE, asset.path)

        logger.info(f"Image loaded: {image.width}x{image.height}")
        return image

    # Filters

    def output_path_for(self, asset: SourceAsset, recipe: FilterRecipe) -> Path:
        return self.config.edited_dir / f"{asset.stem}-{recipe.name}{asset.suffix}"

    def _run_filters(self, image: ImageBuffer, asset: SourceAsset) -> list[FilterOutcome]:
        if self.config.parallel_filters and len(self.recipes) > 1:
            with ThreadPoolExecutor(max_workers=len(self.recipes)) as executor:
                return list(
                    executor.map(
                        lambda recipe: self._run_filter(image, asset, recipe),
                        self.recipes,
                    )
                )
        return [self._run_filter(image, asset, recipe) for recipe in self.recipes]

    def _run_filter(
        self, image: ImageBuffer, asset: SourceAsset, recipe: FilterRecipe
    ) -> FilterOutcome:
        logger.info(f"Applying filter {recipe.name}...")

        try:
            filtered = self.filter_pipeline.apply(image.clone(), recipe)
        except Exception as e:
            error = FilterError(recipe.name, e)
            logger.error(f"Filter {recipe.name} failed: {e}")
            return FilterOutcome(recipe.name, False, error=error)

        output_path = self.output_path_for(asset, recipe)
        try:
            written = self.codec.encode(filtered, output_path)
        except Exception as e:
            error = OutputError(recipe.name, output_path, str(e))
            logger.error(f"Saving filter {recipe.name} failed: {e}")
            return FilterOutcome(recipe.name, False, error=error)

        if not written:
            logger.error(f"Saving filter {recipe.name} failed: {output_path}")
            return FilterOutcome(
                recipe.name, False, error=OutputError(recipe.name, output_path)
            )

        size_kb = output_path.stat().st_size / 1024 if output_path.exists() else 0
        logger.info(f"Filter {recipe.name} saved to {output_path} ({size_kb:.0f} KB)")
        return FilterOutcome(recipe.name, True, output_path=output_path)

    # Relocation

    def _relocate(self, asset: SourceAsset, report: ProcessingReport) -> None:
        destination = self.config.archive_dir / asset.path.name
        logger.info(f"Moving original to {destination}")

        try:
            try:
                os.replace(asset.path, destination)
            except OSError:
                # Cross-device moves need a copy.
                shutil.move(str(asset.path), str(destination))
        except OSError as e:
            warning = RelocationWarning(asset.path, destination, str(e))
            logger.warning(f"Could not move the original: {warning}")
            report.relocation_error = warning
            return

        report.archived_path = destination
        logger.info("Original moved successfully")
