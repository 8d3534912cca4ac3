"""Configuration management for the recipe store.

Loads environment variables from system environment and .env file.
Priority order: system environment > .env file > hardcoded defaults
"""

import os

from dotenv import load_dotenv

from recipe_store.models.models import MeasurementUnit


# Load .env file (if exists, silently continues if missing)
load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        # Name matching: applies to every lookup by recipe, ingredient or restriction name
        self.NAME_MATCH_CASE_SENSITIVE: bool = os.getenv("NAME_MATCH_CASE_SENSITIVE", "true").lower() in (
            "true",
            "1",
            "yes",
        )
        # Amount recorded for an ingredient line that does not carry one. Default: 0
        self.DEFAULT_INGREDIENT_AMOUNT: float = float(os.getenv("DEFAULT_INGREDIENT_AMOUNT", "0"))
        # Unit recorded for an ingredient line that does not carry one. Default: Units
        self.DEFAULT_MEASUREMENT_UNIT: str = os.getenv("DEFAULT_MEASUREMENT_UNIT", MeasurementUnit.UNITS.value)
        # First primary key handed out by the in-memory store. Default: 1
        self.PRIMARY_KEY_SEED: int = int(os.getenv("PRIMARY_KEY_SEED", "1"))

    @property
    def default_measurement_unit(self) -> MeasurementUnit:
        """DEFAULT_MEASUREMENT_UNIT as an enum member."""
        return MeasurementUnit(self.DEFAULT_MEASUREMENT_UNIT)

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If a variable holds a value outside its allowed range.
        """
        valid_units = [unit.value for unit in MeasurementUnit]
        if self.DEFAULT_MEASUREMENT_UNIT not in valid_units:
            raise ValueError(
                f"DEFAULT_MEASUREMENT_UNIT must be one of {valid_units}, got: {self.DEFAULT_MEASUREMENT_UNIT}"
            )
        if self.DEFAULT_INGREDIENT_AMOUNT < 0:
            raise ValueError(
                f"DEFAULT_INGREDIENT_AMOUNT must be non-negative, got: {self.DEFAULT_INGREDIENT_AMOUNT}"
            )
        if self.PRIMARY_KEY_SEED < 1:
            raise ValueError(
                f"PRIMARY_KEY_SEED must be at least 1, got: {self.PRIMARY_KEY_SEED}"
            )


# Create module-level config instance and validate immediately
config = Config()
config.validate()
