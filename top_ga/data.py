import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from .solvers.base import Point, with_locality_keys


logger = logging.getLogger(__name__)

HEADER_KEYS = ("n", "m", "tmax")


class MalformedDatasetError(ValueError):
    """Raised when a TOP-format file (or an in-memory dataset) cannot be used."""


@dataclass(frozen=True)
class Dataset:
    file_name: str
    n_points: int
    n_routes: int
    t_max: float
    points: Tuple[Point, ...]

    @property
    def name(self) -> str:
        return Path(self.file_name).stem

    @property
    def start(self) -> Point:
        return self.points[0]

    @property
    def end(self) -> Point:
        return self.points[-1]

    @property
    def candidates(self) -> Tuple[Point, ...]:
        """Points that are neither the start nor the end anchor."""
        return self.points[1:-1]


def _parse_header(line: str, expected: str, lineno: int) -> str:
    parts = line.split()
    if len(parts) < 2 or parts[0] != expected:
        raise MalformedDatasetError(
            f"line {lineno}: expected '{expected} <value>', got {line.strip()!r}"
        )
    return parts[1]


def parse_top(text: str, file_name: str = "<memory>") -> Dataset:
    """
    Parse TOP-format text: ``n``, ``m`` and ``tmax`` header lines followed by
    one ``x y score`` line per point. The first point is the start anchor and
    the last point is the end anchor.
    """
    lines = [(i, line) for i, line in enumerate(text.splitlines(), start=1) if line.strip()]
    if len(lines) < 3:
        raise MalformedDatasetError(f"{file_name}: missing TOP header")
    values = [_parse_header(line, key, i) for (i, line), key in zip(lines[:3], HEADER_KEYS)]
    try:
        n_points = int(values[0])
        n_routes = int(values[1])
        t_max = float(values[2])
    except ValueError as exc:
        raise MalformedDatasetError(f"{file_name}: invalid header value ({exc})") from exc
    if n_routes == 0:
        raise MalformedDatasetError(f"{file_name}: number of routes (m) cannot be 0")

    points: List[Point] = []
    for lineno, line in lines[3:]:
        parts = line.split()
        if len(parts) < 3:
            raise MalformedDatasetError(f"{file_name}: line {lineno}: expected 'x y score'")
        try:
            x, y, score = (float(v) for v in parts[:3])
        except ValueError as exc:
            raise MalformedDatasetError(f"{file_name}: line {lineno}: {exc}") from exc
        points.append(Point(len(points) + 1, x, y, score))

    if len(points) < 2:
        raise MalformedDatasetError(f"{file_name}: a start and an end point are required")
    if len(points) != n_points:
        logger.warning("%s declares n=%d but lists %d points", file_name, n_points, len(points))
    return Dataset(
        file_name=file_name,
        n_points=n_points,
        n_routes=n_routes,
        t_max=t_max,
        points=tuple(with_locality_keys(points)),
    )


def load_dataset(path: Path) -> Dataset:
    path = Path(path)
    return parse_top(path.read_text(), file_name=path.name)


def _read_point_count(path: Path) -> Optional[int]:
    try:
        with path.open("r") as f:
            for line in f:
                parts = line.split()
                if len(parts) >= 2 and parts[0] == "n" and parts[1].isdigit():
                    return int(parts[1])
        return None
    except OSError:
        return None


def instance_files(root: Path) -> List[Path]:
    root = Path(root)
    if root.is_file():
        return [root]
    return sorted(p for p in root.iterdir() if p.is_file() and not p.name.startswith("."))


def load_datasets(
    root: Path, max_points: Optional[int] = None, max_instances: Optional[int] = None
) -> List[Dataset]:
    datasets: List[Dataset] = []
    for p in instance_files(root):
        if max_points is not None:
            n = _read_point_count(p)
            if n is not None and n > max_points:
                continue
        datasets.append(load_dataset(p))
        if max_instances is not None and len(datasets) >= max_instances:
            break
    return datasets
