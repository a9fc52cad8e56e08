import logging

import pytest

from awv_visits.templates import TemplateStore

from helpers.builders import TEMPLATE_DIR, three_section_template


@pytest.fixture(scope="session")
def template_store():
    """Load the bundled templates once for the entire test session."""
    s = TemplateStore(TEMPLATE_DIR)
    s.load()
    return s


@pytest.fixture
def standard_template(template_store):
    return template_store.get_template("awv-standard")


@pytest.fixture
def simple_template():
    return three_section_template()


@pytest.fixture(autouse=True)
def _debug_logging(caplog):
    caplog.set_level(logging.DEBUG, logger="awv_visits")
