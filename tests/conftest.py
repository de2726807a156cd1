import pytest

from schema_decorators import SchemaRegistry
from schema_decorators.schema import clear_cache

from .models import Address, Employee, House, Job, Office, Person


@pytest.fixture
def registry():
    """A registry isolated from the shared default registry."""
    return SchemaRegistry()


@pytest.fixture(autouse=True)
def _clear_schema_file_cache():
    yield
    clear_cache()


@pytest.fixture
def person():
    return Person(
        email="jane@example.com",
        age=34,
        house=House(address=Address(location="12 Harbour St"), type="UNIT"),
    )


@pytest.fixture
def employee():
    return Employee(
        email="jane@example.com",
        age=34,
        house=House(address=Address(location="12 Harbour St"), type="VILLA"),
        job=Job(job_title="ENGINEER", office=[Office(name="HQ", location="Sydney")]),
        employee_id="E-100",
    )
