"""
Heat Records

Adapters from aggregated heat data, delivered as (tile id, intensity) pairs,
to renderable HeatCircles centred on each tile. load_tile_records() reads the
same pairs from a YAML mapping of tile id to intensity, e.g.

    grid_150_m_33671_94566: 0.8
    grid_150_m_33667_94573: 0.35
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

import yaml

from tidepool.core.heat.compositor import HeatCircle
from tidepool.core.tiling import TileId, tile_center
from tidepool.utils.error_handling import ConfigError

logger = logging.getLogger(__name__)


def load_tile_records(path: Union[str, Path]) -> List[Tuple[str, float]]:
    """
    Read (tile id, intensity) pairs from a YAML file.

    Raises:
        ConfigError: If the file is not a YAML mapping of tile ids to numbers
    """
    path = Path(path)
    with open(path, 'r', encoding='utf-8') as f:
        try:
            document = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse heat records {path}: {e}") from e

    if not isinstance(document, dict):
        raise ConfigError(f"{path} must map tile ids to intensities")

    records: List[Tuple[str, float]] = []
    for key, value in document.items():
        try:
            records.append((str(key), float(value)))
        except (TypeError, ValueError):
            raise ConfigError(f"Heat record '{key}' in {path} has non-numeric intensity {value!r}")
    logger.debug(f"Loaded {len(records)} heat records from {path}")
    return records


def circles_from_tiles(
    records: Iterable[Tuple[str, float]],
    radius_m: Optional[float] = None,
    weight: float = 1.0,
) -> List[HeatCircle]:
    """
    Build one HeatCircle per tile record.

    Args:
        records: (tile id string, intensity) pairs
        radius_m: Disk radius; defaults to half the tile edge
        weight: Viewer heat weight multiplied into every intensity

    Returns:
        Circles for every parseable record. Malformed tile ids are logged and skipped.
    """
    circles: List[HeatCircle] = []
    for key, intensity in records:
        try:
            tile = TileId.parse(key)
        except ValueError:
            logger.warning(f"Skipping heat record with malformed tile id '{key}'")
            continue
        radius = radius_m if radius_m is not None else tile.meters_per_tile / 2.0
        circles.append(HeatCircle(tile_center(tile), radius, float(intensity) * weight, label=key))
    return circles
