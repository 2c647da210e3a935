import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
src_root = ROOT / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="also run full-size flock simulations (hundreds of agents over hundreds of ticks)",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "slow: full-size flock run with O(N^2) neighbor passes; skipped unless --run-slow is given",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--run-slow"):
        return

    slow_items = [item for item in items if "slow" in item.keywords]
    for item in slow_items:
        item.add_marker(pytest.mark.skip(reason="full-size flock run; pass --run-slow to include it"))
