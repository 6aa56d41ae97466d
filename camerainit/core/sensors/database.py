"""Camera sensor width database."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Union

from ..errors import SensorDatabaseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Datasheet:
    """Sensor description of one camera model."""

    brand: str
    model: str
    sensor_width_mm: float

    def matches(self, brand: str, model: str) -> bool:
        """Check if a queried (brand, model) designates this camera.

        The brand must equal one of the datasheet's space-separated brand
        tokens, ignoring case. Every token of the queried model containing a
        digit must appear among the datasheet's model tokens, ignoring case;
        tokens without digits ("PowerShot", "DSC") are not required.
        """
        brand_lower = brand.strip().lower()
        if brand_lower not in (b.lower() for b in self.brand.split()):
            return False

        sheet_tokens = {m.lower() for m in self.model.split()}
        for token in model.split():
            if any(c.isdigit() for c in token) and token.lower() not in sheet_tokens:
                return False
        return True


class SensorDatabase:
    """Read-only collection of sensor datasheets."""

    def __init__(self, datasheets: Optional[Iterable[Datasheet]] = None):
        self.datasheets: List[Datasheet] = list(datasheets or [])

    def __len__(self) -> int:
        return len(self.datasheets)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "SensorDatabase":
        """Load a database file.

        Args:
            path: Text file with one "brand;model;sensorWidth" entry per line

        Returns:
            The parsed database

        Raises:
            SensorDatabaseError: If the file is missing or a line is malformed
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise SensorDatabaseError(f"Cannot read sensor database '{path}': {e}") from e
        return cls.parse(text.splitlines(), source=str(path))

    @classmethod
    def parse(cls, lines: Iterable[str], source: str = "<string>") -> "SensorDatabase":
        """Parse database lines, skipping blanks and '#' comments."""
        datasheets = []
        for line_number, line in enumerate(lines, start=1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            fields = line.split(";")
            if len(fields) < 3:
                raise SensorDatabaseError(
                    f"{source}:{line_number}: expected 'brand;model;sensorWidth', got {line!r}"
                )
            brand, model, width = fields[0].strip(), fields[1].strip(), fields[2].strip()
            try:
                sensor_width = float(width)
            except ValueError:
                raise SensorDatabaseError(
                    f"{source}:{line_number}: invalid sensor width {width!r}"
                ) from None
            if sensor_width <= 0:
                raise SensorDatabaseError(
                    f"{source}:{line_number}: sensor width must be > 0, got {sensor_width}"
                )
            datasheets.append(Datasheet(brand=brand, model=model, sensor_width_mm=sensor_width))

        logger.debug(f"Loaded {len(datasheets)} sensor datasheets from {source}")
        return cls(datasheets)

    def lookup(self, make: str, model: str) -> Optional[Datasheet]:
        """Find the first datasheet matching a camera make and model."""
        for datasheet in self.datasheets:
            if datasheet.matches(make, model):
                return datasheet
        return None
