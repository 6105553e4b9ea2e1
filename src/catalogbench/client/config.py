"""Test client configuration: loading, editing and atomic persistence.

The configuration is an immutable value. Edits produce a new
``ClientConfig`` which the caller writes back with ``save_client_config``.
On disk the file uses camelCase keys::

    {
      "baseUrl": "http://localhost:3000",
      "endpoints": {"products": "/api/products", "health": "/health"},
      "testData": {"product": {...}, "sampleProducts": [...]},
      "stressTest": {"duration": 10, "concurrentRequests": 10,
                     "requestDelay": 100, "timeoutMs": 5000}
    }
"""

from __future__ import annotations

import contextlib
import dataclasses
import json
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from catalogbench._internal.errors import ConfigError
from catalogbench._internal.logging import get_logger

if TYPE_CHECKING:
    from catalogbench._internal.types import JsonDict

logger = get_logger("client.config")

CONFIG_ENV_VAR = "CATALOGBENCH_CONFIG"
DEFAULT_CONFIG_PATH = Path("config.json")

DEFAULT_PRODUCT: JsonDict = {
    "name": "Test Product",
    "description": "A product created by the catalogbench test client",
    "price": 19.99,
    "stock": 50,
    "category": "electronics",
    "imageUrl": "https://example.com/images/test-product.png",
}

DEFAULT_SAMPLE_PRODUCTS: tuple[JsonDict, ...] = (
    {
        "name": "Wireless Headphones",
        "description": "Over-ear headphones with active noise cancelling",
        "price": 129.99,
        "stock": 25,
        "category": "electronics",
    },
    {
        "name": "Cotton T-Shirt",
        "description": "Plain crew-neck t-shirt, 100% cotton",
        "price": 14.5,
        "stock": 200,
        "category": "clothing",
    },
    {
        "name": "Python Cookbook",
        "description": "Recipes for mastering Python 3",
        "price": 39.95,
        "stock": 40,
        "category": "books",
    },
    {
        "name": "Oak Bookshelf",
        "description": "Five-shelf bookcase in solid oak",
        "price": 249.0,
        "stock": 8,
        "category": "furniture",
    },
    {
        "name": "Building Blocks Set",
        "description": "500-piece construction set for ages 6 and up",
        "price": 34.99,
        "stock": 60,
        "category": "toys",
    },
)

# Menu labels of the settings the operator may change at runtime.
EDITABLE_SETTINGS: tuple[str, ...] = (
    "Base URL",
    "Concurrent Requests",
    "Request Delay",
    "Test Duration",
    "Timeout",
)


@dataclass(frozen=True)
class Endpoints:
    """Paths of the service endpoints, relative to the base URL."""

    products: str = "/api/products"
    health: str = "/health"

    def product(self, product_id: str) -> str:
        """Return the path of a single product."""
        return f"{self.products}/{product_id}"


@dataclass(frozen=True)
class TestData:
    """Payloads used by the functional tests and product seeding.

    Attributes:
        product: Default payload for create/update requests.
        sample_products: Products inserted by the "sample products" action.
    """

    __test__ = False  # not a pytest test class

    product: JsonDict = field(default_factory=lambda: dict(DEFAULT_PRODUCT))
    sample_products: tuple[JsonDict, ...] = DEFAULT_SAMPLE_PRODUCTS


@dataclass(frozen=True)
class StressTestSettings:
    """Tuning parameters of the stress test.

    Attributes:
        duration: Wall-clock test duration in seconds.
        concurrent_requests: Invocations launched per batch.
        request_delay: Milliseconds slept after each launch inside a batch.
        timeout_ms: Per-request transport timeout in milliseconds.
    """

    duration: int = 10
    concurrent_requests: int = 10
    request_delay: int = 100
    timeout_ms: int = 5000


@dataclass(frozen=True)
class ClientConfig:
    """Complete test client configuration."""

    base_url: str = "http://localhost:3000"
    endpoints: Endpoints = field(default_factory=Endpoints)
    test_data: TestData = field(default_factory=TestData)
    stress_test: StressTestSettings = field(default_factory=StressTestSettings)

    @classmethod
    def from_dict(cls, data: Any) -> ClientConfig:
        """Build a config from its on-disk form, filling missing keys with defaults.

        Raises:
            ConfigError: If a section has the wrong shape or a value the
                wrong type.
        """
        if not isinstance(data, dict):
            msg = "Configuration must be a JSON object"
            raise ConfigError(msg)

        defaults = cls()
        endpoints = _section(data, "endpoints")
        test_data = _section(data, "testData")
        stress = _section(data, "stressTest")

        samples = test_data.get("sampleProducts", list(defaults.test_data.sample_products))
        if not isinstance(samples, list) or not all(isinstance(p, dict) for p in samples):
            msg = "testData.sampleProducts must be a list of objects"
            raise ConfigError(msg)
        product = test_data.get("product", defaults.test_data.product)
        if not isinstance(product, dict):
            msg = "testData.product must be an object"
            raise ConfigError(msg)

        config = cls(
            base_url=_str(data.get("baseUrl", defaults.base_url), "baseUrl"),
            endpoints=Endpoints(
                products=_str(endpoints.get("products", defaults.endpoints.products), "endpoints.products"),
                health=_str(endpoints.get("health", defaults.endpoints.health), "endpoints.health"),
            ),
            test_data=TestData(product=dict(product), sample_products=tuple(samples)),
            stress_test=StressTestSettings(
                duration=_int(stress.get("duration", defaults.stress_test.duration), "stressTest.duration"),
                concurrent_requests=_int(
                    stress.get("concurrentRequests", defaults.stress_test.concurrent_requests),
                    "stressTest.concurrentRequests",
                ),
                request_delay=_int(
                    stress.get("requestDelay", defaults.stress_test.request_delay),
                    "stressTest.requestDelay",
                ),
                timeout_ms=_int(stress.get("timeoutMs", defaults.stress_test.timeout_ms), "stressTest.timeoutMs"),
            ),
        )
        _validate_stress(config.stress_test)
        return config

    def to_dict(self) -> JsonDict:
        """Return the on-disk form of this config."""
        return {
            "baseUrl": self.base_url,
            "endpoints": {
                "products": self.endpoints.products,
                "health": self.endpoints.health,
            },
            "testData": {
                "product": dict(self.test_data.product),
                "sampleProducts": [dict(p) for p in self.test_data.sample_products],
            },
            "stressTest": {
                "duration": self.stress_test.duration,
                "concurrentRequests": self.stress_test.concurrent_requests,
                "requestDelay": self.stress_test.request_delay,
                "timeoutMs": self.stress_test.timeout_ms,
            },
        }


def _section(data: JsonDict, key: str) -> JsonDict:
    value = data.get(key, {})
    if not isinstance(value, dict):
        msg = f"{key} must be an object"
        raise ConfigError(msg)
    return value


def _str(value: Any, key: str) -> str:
    if not isinstance(value, str) or not value:
        msg = f"{key} must be a non-empty string, got: {value!r}"
        raise ConfigError(msg)
    return value


def _int(value: Any, key: str) -> int:
    if isinstance(value, bool):
        msg = f"{key} must be an integer, got: {value!r}"
        raise ConfigError(msg)
    try:
        return int(value)
    except (TypeError, ValueError):
        msg = f"{key} must be an integer, got: {value!r}"
        raise ConfigError(msg) from None


def _validate_stress(settings: StressTestSettings) -> None:
    if settings.duration < 1:
        msg = f"Test duration must be >= 1 second, got: {settings.duration}"
        raise ConfigError(msg)
    if settings.concurrent_requests < 1:
        msg = f"Concurrent requests must be >= 1, got: {settings.concurrent_requests}"
        raise ConfigError(msg)
    if settings.request_delay < 0:
        msg = f"Request delay must be >= 0 ms, got: {settings.request_delay}"
        raise ConfigError(msg)
    if settings.timeout_ms < 1:
        msg = f"Timeout must be >= 1 ms, got: {settings.timeout_ms}"
        raise ConfigError(msg)


def config_path_from_env() -> Path:
    """Return the config file path named by ``CATALOGBENCH_CONFIG``.

    Defaults to ``config.json`` in the working directory.
    """
    value = os.environ.get(CONFIG_ENV_VAR, "")
    return Path(value) if value else DEFAULT_CONFIG_PATH


def load_client_config(path: Path) -> ClientConfig:
    """Load the configuration file, creating it from defaults if missing.

    Args:
        path: Location of the JSON configuration file.

    Returns:
        The loaded configuration.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    if not path.exists():
        config = ClientConfig()
        save_client_config(config, path)
        logger.info("Created default configuration at %s", path)
        return config

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Cannot read configuration file {path}: {exc}"
        raise ConfigError(msg) from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        msg = f"Configuration file {path} is not valid JSON: {exc}"
        raise ConfigError(msg) from exc

    return ClientConfig.from_dict(data)


def save_client_config(config: ClientConfig, path: Path) -> None:
    """Write the configuration, replacing the whole file atomically.

    The content goes to a temporary file in the same directory which is
    then renamed over ``path``, so a crash never leaves a half-written file.

    Raises:
        ConfigError: If the file cannot be written.
    """
    directory = path.parent
    payload = json.dumps(config.to_dict(), indent=2) + "\n"
    try:
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise
    except OSError as exc:
        msg = f"Cannot write configuration file {path}: {exc}"
        raise ConfigError(msg) from exc
    logger.debug("Configuration written to %s", path)


def apply_edit(config: ClientConfig, setting: str, value: str) -> ClientConfig:
    """Return a copy of ``config`` with one editable setting changed.

    Args:
        config: Current configuration.
        setting: One of ``EDITABLE_SETTINGS``.
        value: Raw operator input.

    Returns:
        The updated configuration.

    Raises:
        ConfigError: If the setting is unknown or the value is invalid.
    """
    value = value.strip()

    if setting == "Base URL":
        if not value.startswith(("http://", "https://")):
            msg = f"Base URL must start with http:// or https://, got: {value!r}"
            raise ConfigError(msg)
        return dataclasses.replace(config, base_url=value.rstrip("/"))

    field_names = {
        "Concurrent Requests": "concurrent_requests",
        "Request Delay": "request_delay",
        "Test Duration": "duration",
        "Timeout": "timeout_ms",
    }
    if setting not in field_names:
        msg = f"Unknown setting: {setting!r}. Choose from: {', '.join(EDITABLE_SETTINGS)}"
        raise ConfigError(msg)

    try:
        number = int(value)
    except ValueError:
        msg = f"{setting} must be an integer, got: {value!r}"
        raise ConfigError(msg) from None

    stress = dataclasses.replace(config.stress_test, **{field_names[setting]: number})
    _validate_stress(stress)
    return dataclasses.replace(config, stress_test=stress)
