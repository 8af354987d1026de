import sys

import pytest
import structlog

from src.timetable.catalog import Catalog
from src.timetable.composer import TimetableComposer
from src.timetable.models import CatalogItem, ClassRef


@pytest.fixture(autouse=True)
def _uncache_module_loggers():
    """Drop loggers cached on module-level proxies so no test inherits another's stream."""
    yield
    for name, module in list(sys.modules.items()):
        if not name.startswith("src.timetable"):
            continue
        for value in vars(module).values():
            if isinstance(value, structlog._config.BoundLoggerLazyProxy):
                value.__dict__.pop("bind", None)


@pytest.fixture
def catalog():
    """Four primary classes, one secondary class, three subjects, two activities."""
    return Catalog(
        classes=[
            ClassRef(id="p1", name="P.1", section="Primary"),
            ClassRef(id="p2", name="P.2", section="Primary"),
            ClassRef(id="p3", name="P.3", section="Primary"),
            ClassRef(id="p4", name="P.4", section="Primary"),
            ClassRef(id="s1", name="S.1", section="Secondary"),
        ],
        subjects=[
            CatalogItem(id="math", name="Mathematics"),
            CatalogItem(id="eng", name="English"),
            CatalogItem(id="sci", name="Science"),
        ],
        activities=[
            CatalogItem(id="swim", name="Swimming"),
            CatalogItem(id="assembly", name="Assembly"),
        ],
    )


@pytest.fixture
def composer(catalog):
    """Session on the Primary section with P.1-P.3 displayed."""
    c = TimetableComposer(catalog, school_name="Test School")
    c.select_section("Primary")
    c.select_classes(["p1", "p2", "p3"])
    return c
