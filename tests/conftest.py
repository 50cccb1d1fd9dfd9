from pathlib import Path

import pytest

_LAYERS = {
    "domain": pytest.mark.domain,
    "application": pytest.mark.application,
    "bdd": pytest.mark.bdd,
    "integration": pytest.mark.integration,
}


def pytest_collection_modifyitems(config, items):
    """Mark tests by the layer directory they live in."""
    for item in items:
        parts = Path(item.fspath).parts
        for layer, marker in _LAYERS.items():
            if layer in parts:
                item.add_marker(marker)
                break

        # HTTP round-trips and thread pools
        if "integration" in parts:
            item.add_marker(pytest.mark.slow)
