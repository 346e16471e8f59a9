"""
Batch processing of geometry files.

Provides:
- Folder-based batch runs of one clustering operation
- Progress tracking and reporting
- Parallel processing support

Usage:
    from geomcluster.batch import batch_process

    results = batch_process(
        input_dir="./panels",
        operation="modules",
        output_dir="./results",
        parallel=True,
    )
    print(results.summary())
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Union

from geomcluster.errors import GeomclusterError
from geomcluster.io.geometry_loader import JSON_SUFFIXES, STL_SUFFIXES
from geomcluster.logging_config import LogContext
from geomcluster.pipeline import OPERATIONS, output_path_for, run_pipeline
from geomcluster.project_config import ProjectConfig, load_config

logger = logging.getLogger(__name__)

DEFAULT_PATTERNS = tuple(f"*{suffix}" for suffix in JSON_SUFFIXES + STL_SUFFIXES)


@dataclass
class JobResult:
    """Result of running one operation on one file."""
    input_path: Path
    output_path: Optional[Path] = None
    success: bool = False
    error: Optional[str] = None
    duration_seconds: float = 0.0

    @property
    def status(self) -> str:
        """Get status string."""
        return "OK" if self.success else "FAILED"


@dataclass
class BatchResult:
    """Result of a batch run."""
    operation: str = ""
    results: List[JobResult] = field(default_factory=list)
    total_duration_seconds: float = 0.0

    @property
    def total(self) -> int:
        """Total number of files processed."""
        return len(self.results)

    @property
    def successful(self) -> int:
        """Number of successful jobs."""
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        """Number of failed jobs."""
        return sum(1 for r in self.results if not r.success)

    @property
    def success_rate(self) -> float:
        """Success rate as percentage."""
        if self.total == 0:
            return 0.0
        return 100.0 * self.successful / self.total

    def summary(self) -> str:
        """Generate human-readable summary."""
        lines = [
            f"Batch Summary ({self.operation})",
            "=" * 40,
            f"Total files:     {self.total}",
            f"Successful:      {self.successful}",
            f"Failed:          {self.failed}",
            f"Success rate:    {self.success_rate:.1f}%",
            f"Total time:      {self.total_duration_seconds:.1f}s",
            "",
        ]

        if self.failed > 0:
            lines.append("Failed files:")
            for r in self.results:
                if not r.success:
                    lines.append(f"  - {r.input_path.name}: {r.error}")

        return "\n".join(lines)

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'operation': self.operation,
            'total': self.total,
            'successful': self.successful,
            'failed': self.failed,
            'success_rate': self.success_rate,
            'total_duration_seconds': self.total_duration_seconds,
            'results': [
                {
                    'input': str(r.input_path),
                    'output': str(r.output_path) if r.output_path else None,
                    'success': r.success,
                    'error': r.error,
                    'duration': r.duration_seconds,
                }
                for r in self.results
            ],
        }


def find_geometry_files(
    input_dir: Union[str, Path],
    patterns: Sequence[str] = DEFAULT_PATTERNS,
    recursive: bool = False,
) -> List[Path]:
    """Find geometry files in a directory.

    Matching is case-insensitive on the suffix, so "*.stl" also finds
    "PART.STL". Config files (".geomcluster.json") are never included.

    Raises:
        FileNotFoundError: if input_dir does not exist
        NotADirectoryError: if input_dir is a file
    """
    input_dir = Path(input_dir)

    if not input_dir.exists():
        raise FileNotFoundError(f"Input directory not found: {input_dir}")

    if not input_dir.is_dir():
        raise NotADirectoryError(f"Not a directory: {input_dir}")

    files = set()
    for pattern in patterns:
        for variant in {pattern, pattern.lower(), pattern.upper()}:
            found = input_dir.rglob(variant) if recursive else input_dir.glob(variant)
            files.update(p for p in found if p.is_file() and not p.name.startswith('.'))

    result = sorted(files)
    logger.info("Found %d geometry files in %s", len(result), input_dir)
    return result


def process_single_file(
    input_path: Path,
    operation: str,
    output_dir: Path,
    config: Optional[ProjectConfig] = None,
) -> JobResult:
    """Run one operation on one file; failures are captured, not raised."""
    start_time = time.perf_counter()
    result = JobResult(input_path=input_path)

    with LogContext(job=input_path.name, operation=operation):
        try:
            output_path = output_path_for(input_path, operation, config, output_dir)
            result.output_path = run_pipeline(input_path, operation,
                                              output_path=output_path, config=config)
            result.success = True
        except (GeomclusterError, OSError, ValueError) as e:
            result.error = str(e)
            logger.error("Failed to process %s: %s", input_path.name, e)

    result.duration_seconds = time.perf_counter() - start_time
    return result


def batch_process(
    input_dir: Union[str, Path],
    operation: str,
    output_dir: Optional[Union[str, Path]] = None,
    patterns: Sequence[str] = DEFAULT_PATTERNS,
    recursive: bool = False,
    config: Optional[ProjectConfig] = None,
    config_path: Optional[Union[str, Path]] = None,
    parallel: bool = False,
    max_workers: Optional[int] = None,
    progress_callback: Optional[Callable[[int, int, JobResult], None]] = None,
) -> BatchResult:
    """Run one operation on every geometry file in a directory.

    Args:
        input_dir: Directory containing geometry files
        operation: Operation name (see `geomcluster.pipeline.OPERATIONS`)
        output_dir: Output directory (default: config, else input directory)
        patterns: Glob patterns for input files
        recursive: Search subdirectories
        config: Project configuration
        config_path: Path to .geomcluster.json config file
        parallel: Use a thread pool
        max_workers: Maximum parallel workers (None = executor default)
        progress_callback: Called after each file: (current, total, result)

    Returns:
        BatchResult with per-file statistics

    Raises:
        ValueError: if the operation name is unknown
        FileNotFoundError, NotADirectoryError: if input_dir is not a directory
    """
    if operation not in OPERATIONS:
        raise ValueError(f"Unknown operation {operation!r}")

    start_time = time.perf_counter()
    input_dir = Path(input_dir)

    if config is None:
        config = load_config(input_path=input_dir / "batch", explicit_config=config_path)

    files = find_geometry_files(input_dir, patterns, recursive)

    output_dir = Path(output_dir or config.output.output_dir or input_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    if not files:
        logger.warning("No geometry files found in %s", input_dir)
        return BatchResult(operation=operation,
                           total_duration_seconds=time.perf_counter() - start_time)

    logger.info("Starting batch %s: %d files, parallel=%s", operation, len(files), parallel)

    results: List[JobResult] = []

    def _record(i: int, result: JobResult) -> None:
        results.append(result)
        if progress_callback:
            progress_callback(i, len(files), result)
        logger.info("[%d/%d] %s: %s (%.1fs)", i, len(files),
                    result.input_path.name, result.status, result.duration_seconds)

    if parallel:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [
                executor.submit(process_single_file, f, operation, output_dir, config)
                for f in files
            ]
            for i, future in enumerate(as_completed(futures), 1):
                _record(i, future.result())
        results.sort(key=lambda r: r.input_path)
    else:
        for i, path in enumerate(files, 1):
            _record(i, process_single_file(path, operation, output_dir, config))

    batch_result = BatchResult(
        operation=operation,
        results=results,
        total_duration_seconds=time.perf_counter() - start_time,
    )

    logger.info(
        "Batch %s complete: %d/%d successful (%.1f%%) in %.1fs",
        operation, batch_result.successful, batch_result.total,
        batch_result.success_rate, batch_result.total_duration_seconds
    )

    return batch_result
