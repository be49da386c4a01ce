from __future__ import annotations

from typing import Any

import pytest

from diforge.container import Container

_RULES_MARKER = "diforge_rules"


def pytest_configure(config: pytest.Config) -> None:
    """Register the ``diforge_rules`` marker."""
    config.addinivalue_line(
        "markers",
        f"{_RULES_MARKER}(rules): apply container rules to the diforge_container fixture",
    )


@pytest.fixture()
def diforge_container(request: pytest.FixtureRequest) -> Container:
    """Create a per-test container.

    Rules passed to ``@pytest.mark.diforge_rules(...)`` are applied before the
    test runs. Markers closer to the test are applied last.

    Returns:
        A new ``Container`` instance.

    """
    container = Container()
    markers: list[Any] = list(request.node.iter_markers(_RULES_MARKER))
    for marker in reversed(markers):
        for rules in marker.args:
            container.set_rules(rules)
    return container
