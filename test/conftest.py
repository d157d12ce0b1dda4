import pytest


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--runintegration",
        action="store_true",
        default=False,
        help="also run the tests that query the live AUR",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "integration: test talks to the live AUR over the network")


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--runintegration"):
        return
    offline = pytest.mark.skip(reason="queries the live AUR; pass --runintegration to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(offline)
