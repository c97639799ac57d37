import argparse
import logging
from typing import List, Optional, Sequence

from . import config
from .clients import ObsPortalClient, OpenSenseMapClient
from .errors import ConfigurationError
from .models import Box, RunStats
from .progress import LoggingObserver
from .services import ExportService, ExportServiceConfig
from .watermark import FileWatermarkStore

LOGGER = logging.getLogger(__name__)


def _setup_logging(verbose: bool = False) -> None:
    root = logging.getLogger()
    if not root.hasHandlers():
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )
    elif verbose:
        # Handlers configured elsewhere; still honour --verbose.
        root.setLevel(logging.DEBUG)


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="sense-to-obs",
        description="Export senseBox overtaking-distance trips to an OpenBikeSensor portal.",
    )
    parser.add_argument(
        "--box-id",
        action="append",
        dest="box_ids",
        metavar="ID",
        help="Process only this box (repeatable). Defaults to DEBUG_BOX_ID or discovery.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=config.DRY_RUN,
        help="Build track files without uploading or moving watermarks.",
    )
    parser.add_argument(
        "--output-dir",
        default=config.OUTPUT_DIR or None,
        help="Also write every track file into this directory.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def _resolve_boxes(
    box_ids: Optional[List[str]], source: OpenSenseMapClient
) -> List[Box]:
    if box_ids:
        return [Box(box_id=box_id) for box_id in box_ids]
    if config.DEBUG_BOX_ID:
        LOGGER.info("Processing debug box ID: %s", config.DEBUG_BOX_ID)
        return [Box(box_id=config.DEBUG_BOX_ID)]
    return source.fetch_boxes()


def run(
    box_ids: Optional[List[str]] = None,
    *,
    dry_run: bool = False,
    output_dir: Optional[str] = None,
) -> RunStats:
    """Validate configuration, then export every box's new trips.

    Raises:
        ConfigurationError: When uploads are enabled but not configured.
    """
    uploader = None
    if not dry_run:
        config.require_upload_settings()
        uploader = ObsPortalClient(config.OBS_HOST, config.OBS_API_KEY)

    source = OpenSenseMapClient()
    boxes = _resolve_boxes(box_ids, source)
    if not boxes:
        LOGGER.info("No boxes found to process")
        return RunStats()

    service = ExportService(
        ExportServiceConfig(
            source=source,
            uploader=uploader,
            watermarks=FileWatermarkStore(config.LAST_UPDATE_DIR),
            observer=LoggingObserver(),
            output_dir=output_dir,
        )
    )
    return service.process(boxes)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    _setup_logging(args.verbose)
    LOGGER.info("Starting data processing ...")
    try:
        stats = run(args.box_ids, dry_run=args.dry_run, output_dir=args.output_dir)
    except ConfigurationError as exc:
        LOGGER.error("%s", exc)
        return 1
    LOGGER.info(
        "Finished: %d trips uploaded, %d uploads failed, %d files written",
        stats.uploaded,
        stats.upload_failures,
        len(stats.written),
    )
    return 0
