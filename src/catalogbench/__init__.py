"""catalogbench -- a product catalog service and the tool that tests it."""

from __future__ import annotations

from catalogbench.client.config import ClientConfig, load_client_config, save_client_config
from catalogbench.client.invoker import EndpointInvoker, InvocationResult
from catalogbench.client.stress import StressTestResult, run_stress_test
from catalogbench.service.app import create_app
from catalogbench.service.store import MemoryProductStore, MongoProductStore, ProductStore, open_store

__version__ = "0.1.0"

__all__ = [
    "ClientConfig",
    "EndpointInvoker",
    "InvocationResult",
    "MemoryProductStore",
    "MongoProductStore",
    "ProductStore",
    "StressTestResult",
    "create_app",
    "load_client_config",
    "open_store",
    "run_stress_test",
    "save_client_config",
]
