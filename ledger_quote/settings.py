import logging
import os
from dataclasses import fields
from pathlib import Path
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.dataclasses import dataclass

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

QUOTE_PARAMS_FILENAME = ".quoteparams"
SETTINGS_FILENAME = ".quoteparams.settings.yaml"
QUOTE_PARAMS_ENV = "LEDGER_QUOTE_PARAMS"


class QuoteSpec(BaseModel):
    """
    One declared source of a rate: a page, a selector inside it,
    and the currency pair the displayed number stands for.

    YAML entries use the key `from`, which is exposed as `from_` here.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    url: str
    select: str
    from_: str = Field(alias="from")
    to: str

    @field_validator("from_", "to", mode="before")
    @classmethod
    def _scalar_code(cls, value):
        # YAML reads codes like `100` as numbers; booleans stay rejected
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("url", "select", "from_", "to")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value

    @field_validator("url")
    @classmethod
    def _http_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError(f"not an absolute http(s) URL: {value!r}")
        return value


def default_quote_params_path() -> Path:
    """
    `$LEDGER_QUOTE_PARAMS` if set, otherwise `~/.quoteparams`.
    """
    env = os.environ.get(QUOTE_PARAMS_ENV)
    if env:
        return Path(env).expanduser()
    return Path.home() / QUOTE_PARAMS_FILENAME


def load_quote_specs(path: str | Path | None = None) -> list[QuoteSpec]:
    """
    Load the list of quote specs from YAML.

    Every entry is validated before anything is returned; a ConfigError lists
    all the problems found, not just the first one.
    """
    path = Path(path) if path is not None else default_quote_params_path()

    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}", {"path": str(path)}) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read config file {path}: {exc}", {"path": str(path)}) from exc

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse config file {path}: {exc}", {"path": str(path)}) from exc

    if data is None:
        return []

    if not isinstance(data, list):
        raise ConfigError(
            f"Expected a list of quotes in {path}, got {type(data).__name__}",
            {"path": str(path)},
        )

    specs: list[QuoteSpec] = []
    errors: list[str] = []
    for i, entry in enumerate(data):
        if not isinstance(entry, dict):
            errors.append(f"entry[{i}]: expected a mapping, got {type(entry).__name__}")
            continue
        try:
            specs.append(QuoteSpec.model_validate(entry))
        except ValidationError as exc:
            for err in exc.errors():
                field = ".".join(str(part) for part in err["loc"]) or "?"
                if field == "from_":
                    field = "from"
                errors.append(f"entry[{i}].{field}: {err['msg']}")

    if errors:
        raise ConfigError(
            f"Invalid config file {path}:\n  " + "\n  ".join(errors),
            {"path": str(path), "errors": errors},
        )

    return specs


@dataclass
class ScrapeConfig:
    """
    Tool-wide scraping behavior.

    Values can be overridden via ~/.quoteparams.settings.yaml.
    """

    # General
    user_agent: str = "Mozilla/5.0 (compatible; ledger-quote)"

    # HTTP client tuning
    http_concurrency: int = Field(default=20, ge=1)
    http_total_timeout_s: float = Field(default=20.0, gt=0)
    http_connect_timeout_s: float = Field(default=10.0, gt=0)
    http_sock_read_timeout_s: float = Field(default=15.0, gt=0)

    # Output
    timestamp_format: str = "%Y/%m/%d"
    use_utc: bool = True


def load_scrape_config(path: str | Path | None = None) -> ScrapeConfig:
    """
    Load ScrapeConfig from YAML if present; otherwise use defaults.

    By default, looks for `.quoteparams.settings.yaml` in the home directory.
    """

    if path is None:
        path = Path.home() / SETTINGS_FILENAME

    path = Path(path)

    if not path.exists():
        logger.debug("Settings YAML not found at %s, using defaults", path)
        return ScrapeConfig()

    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read settings file {path}: {exc}", {"path": str(path)}) from exc

    try:
        data = yaml.safe_load(raw) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse settings file {path}: {exc}", {"path": str(path)}) from exc

    if not isinstance(data, dict):
        logger.warning("Expected mapping in %s, got %s, using defaults", path, type(data).__name__)
        return ScrapeConfig()

    allowed_keys = {f.name for f in fields(ScrapeConfig)}
    filtered = {k: v for k, v in data.items() if k in allowed_keys}

    try:
        return ScrapeConfig(**filtered)
    except ValidationError as exc:
        errors = [
            f"{'.'.join(str(part) for part in err['loc']) or '?'}: {err['msg']}"
            for err in exc.errors()
        ]
        raise ConfigError(
            f"Invalid settings file {path}:\n  " + "\n  ".join(errors),
            {"path": str(path), "errors": errors},
        ) from exc


DEFAULT_SCRAPE_CONFIG = ScrapeConfig()
