from dataclasses import dataclass

from schema_decorators import ObjectSchema, is_, named_schema, nested

from .job import Job
from .person import Person


@named_schema("employee")
@dataclass
class Employee(Person):
    job: Job = nested(ObjectSchema({"title": "Job"}), required=True)
    employee_id: str = is_({"type": "string"}, required=True)
