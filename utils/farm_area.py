from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

Number = Union[int, float, Decimal]


class FarmAreaError(ValueError):
    """Raised when a farm's areas break the total-area constraint."""


@dataclass(frozen=True)
class FarmAreaValidationResult:
    is_valid: bool
    error: Optional[str] = None


def _to_decimal(value: Number) -> Decimal:
    # str() keeps 70.1 as 70.1 instead of its binary float expansion
    return value if isinstance(value, Decimal) else Decimal(str(value))


def validate_farm_area(total_area: Number, arable_area: Number, vegetation_area: Number) -> FarmAreaValidationResult:
    """
    Validates the area distribution of a farm.

    Rules, checked in order:
    - total area must be greater than 0
    - arable area cannot be negative
    - vegetation area cannot be negative
    - arable area + vegetation area must not exceed the total area

    Args:
        total_area: Total farm area in hectares.
        arable_area: Arable area in hectares.
        vegetation_area: Vegetation (preservation) area in hectares.

    Returns:
        FarmAreaValidationResult: is_valid plus the message of the first broken rule.
    """
    total = _to_decimal(total_area)
    arable = _to_decimal(arable_area)
    vegetation = _to_decimal(vegetation_area)

    if total <= 0:
        return FarmAreaValidationResult(False, "Total area must be greater than 0")

    if arable < 0:
        return FarmAreaValidationResult(False, "Arable area cannot be negative")

    if vegetation < 0:
        return FarmAreaValidationResult(False, "Vegetation area cannot be negative")

    used = arable + vegetation
    if used > total:
        return FarmAreaValidationResult(
            False,
            f"Sum of arable and vegetation areas ({used:.2f} ha) exceeds total area ({total:.2f} ha)",
        )

    return FarmAreaValidationResult(True)


def assert_valid_farm_area(total_area: Number, arable_area: Number, vegetation_area: Number) -> None:
    """
    Same as validate_farm_area but raises FarmAreaError with the failure message.
    """
    result = validate_farm_area(total_area, arable_area, vegetation_area)
    if not result.is_valid:
        raise FarmAreaError(result.error)
