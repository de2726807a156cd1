"""Example models registered on the default registry."""

from .house import Address, House
from .person import Person
from .job import Job, Office
from .employee import Employee
