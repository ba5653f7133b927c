"""
Tidepool command line

Commands:
    tidepool render --output overlay.png    Render the synthetic venues to a PNG overlay
    tidepool render -o out.png --tiles heat.yml
                                            Render aggregated tile heat (tile id: intensity)
    tidepool tile LAT LON                   Print the tile id for a coordinate

Defaults come from the YAML configuration (TIDEPOOL_CONFIG_DIR overrides its
location); TIDEPOOL_LOG_LEVEL sets console verbosity.
"""

import argparse
import logging
import sys
import uuid
from pathlib import Path
from typing import List, Optional, Tuple

from tidepool import __version__
from tidepool.common.config import load_reporting
from tidepool.core.heat.compositor import HeatBlobCompositor, save_png
from tidepool.core.heat.projection import WebMercatorViewport
from tidepool.core.heat.records import circles_from_tiles, load_tile_records
from tidepool.core.heat.synthetic import groups_from_config, venue_circles
from tidepool.core.tiling import tile_id
from tidepool.utils.env import env_bool, env_float, env_log_level
from tidepool.utils.error_handling import TidepoolError
from tidepool.utils.session_logging import SessionLogHandler, configure_logging

logger = logging.getLogger(__name__)

DEFAULT_CENTER = (34.096, -118.273)  # Silver Lake / Atwater
DEFAULT_ZOOM = 14.0


def parse_center(value: str) -> Tuple[float, float]:
    try:
        lat, lon = (float(part) for part in value.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected 'lat,lon', got '{value}'")
    return lat, lon


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tidepool", description="Tidepool presence and heat tools")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    render = subparsers.add_parser("render", help="Render synthetic heat to a PNG overlay")
    render.add_argument("--output", "-o", required=True, help="Output PNG path")
    render.add_argument("--center", type=parse_center, default=DEFAULT_CENTER, help="Map centre as 'lat,lon'")
    render.add_argument("--zoom", type=float, default=env_float("TIDEPOOL_ZOOM", DEFAULT_ZOOM),
                        help="Web map zoom level")
    render.add_argument("--width", type=int, default=1024, help="Overlay width in pixels")
    render.add_argument("--height", type=int, default=768, help="Overlay height in pixels")
    source = render.add_mutually_exclusive_group()
    source.add_argument("--circles", action="store_true", help="Render per-point circles instead of blobs")
    source.add_argument("--tiles", help="YAML mapping of tile id to intensity to render as circles")
    render.add_argument("--light", action="store_true", default=env_bool("TIDEPOOL_LIGHT_MODE"),
                        help="Use light-mode alphas")
    render.add_argument("--high-contrast", action="store_true", help="Use high-contrast alphas")
    render.add_argument("--log-dir", help="Write a session log under this directory")

    tile = subparsers.add_parser("tile", help="Print the tile id for a coordinate")
    tile.add_argument("lat", type=float)
    tile.add_argument("lon", type=float)
    tile.add_argument("--meters", type=int, help="Tile edge in meters (default from config)")

    return parser


def cmd_render(args: argparse.Namespace) -> int:
    reporting = load_reporting()
    compositor = HeatBlobCompositor.from_config(
        reporting, light_mode=args.light, high_contrast=args.high_contrast
    )
    viewport = WebMercatorViewport.from_zoom(args.center, args.zoom, args.width, args.height)

    if args.tiles:
        surface = compositor.render_circles(circles_from_tiles(load_tile_records(args.tiles)), viewport)
    elif args.circles:
        radius = reporting.synthetic_venues.per_point_radius_m
        circles = [c for v in reporting.synthetic_venues.venues for c in venue_circles(v, radius)]
        surface = compositor.render_circles(circles, viewport)
    else:
        surface = compositor.render(groups_from_config(reporting), viewport)

    path = save_png(surface, args.output)
    print(path)
    return 0


def cmd_tile(args: argparse.Namespace) -> int:
    meters = args.meters or load_reporting().tiling.meters_per_tile
    print(tile_id((args.lat, args.lon), meters))
    return 0


COMMANDS = {"render": cmd_render, "tile": cmd_tile}


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(env_log_level())

    log_dir = getattr(args, "log_dir", None)
    try:
        if log_dir:
            session_id = f"{args.command}-{uuid.uuid4().hex[:8]}"
            with SessionLogHandler(session_id, Path(log_dir)):
                return COMMANDS[args.command](args)
        return COMMANDS[args.command](args)
    except (TidepoolError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
