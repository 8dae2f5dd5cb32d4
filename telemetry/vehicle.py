"""Vehicle class for identification and the authoritative odometer."""

from typing import Any, Optional

from .calculations import as_number


class Vehicle:
    """Vehicle identification and current odometer reading."""

    def __init__(
        self,
        id: str,
        brand: str,
        model: str,
        year: Any,
        current_odometer: Any = 0,
        registration_number: Optional[str] = None,
    ):
        self.id = id
        self.brand = brand
        self.model = model
        self.year = year
        self.current_odometer = current_odometer
        self.registration_number = registration_number

    @property
    def name(self) -> str:
        """Human-readable vehicle name."""
        parts = [str(p) for p in (self.year, self.brand, self.model) if p]
        return " ".join(parts) or self.id

    @property
    def odometer_value(self) -> Optional[float]:
        """Cleaned current odometer, or None when malformed."""
        return as_number(self.current_odometer)
