"""Environment-driven settings shared by all services to keep decoding behavior deterministic."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from randomorg_wire.core.wire import MAX_FRACTION_DIGITS, WireValueParser


class Settings(BaseSettings):
    """Simple application settings loaded from environment variables or a local .env file."""

    APP_NAME: str = "random.org wire decoder"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    VERSION: str = "0.1.0"
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    WIRE_FRACTION_DIGITS: str = f"1-{MAX_FRACTION_DIGITS}"
    DECODER_INPUT_PATH: str = ""
    DECODER_OUTPUT_PATH: str = ""
    DECODER_METHODS: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def fraction_digits(self) -> tuple[int, int]:
        """Return the (min, max) fractional-second digit bounds.

        Accepts a single count such as ``"6"`` or a range such as ``"1-6"``.
        """

        raw = self.WIRE_FRACTION_DIGITS.strip()
        low, sep, high = raw.partition("-")
        try:
            min_digits = int(low)
            max_digits = int(high) if sep else min_digits
        except ValueError as exc:
            raise ValueError(f"invalid WIRE_FRACTION_DIGITS: {self.WIRE_FRACTION_DIGITS!r}") from exc
        return min_digits, max_digits

    def wire_parser(self) -> WireValueParser:
        """Build a parser honoring the configured fraction digit bounds."""

        min_digits, max_digits = self.fraction_digits()
        return WireValueParser(min_fraction_digits=min_digits, max_fraction_digits=max_digits)

    def decoder_methods(self) -> tuple[str, ...]:
        """Return the method allow-list for the decoder; empty means all methods."""

        items: list[str] = []
        seen: set[str] = set()

        for raw in self.DECODER_METHODS.split(","):
            item = raw.strip()
            if not item or item in seen:
                continue
            seen.add(item)
            items.append(item)

        return tuple(items)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings to avoid repeated environment parsing."""

    return Settings()
