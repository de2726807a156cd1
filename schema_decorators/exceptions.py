# Copyright 2026 TIER IV, inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Custom exceptions for the schema decorators package."""

from typing import List


class SchemaDecoratorError(Exception):
    """Base exception for schema-decorator related errors."""
    pass


class ConfigurationError(SchemaDecoratorError):
    """Exception raised for invalid package configuration."""
    pass


class SchemaNotFoundError(SchemaDecoratorError):
    """Exception raised when no schema is registered for a name or type."""
    pass


class InvalidTargetError(SchemaDecoratorError):
    """Exception raised when a value that is not an object is validated."""
    pass


class SchemaPathError(SchemaDecoratorError):
    """Exception raised when a property path does not exist in a schema."""
    pass


class SchemaFileError(SchemaDecoratorError):
    """Exception raised when a schema file cannot be loaded."""
    pass


class ValidationError(SchemaDecoratorError):
    """Exception raised when an object does not satisfy its schema.

    Attributes:
        issues: List of SchemaIssue objects describing every failure found
    """

    def __init__(self, issues: List):
        self.issues = list(issues)
        super().__init__("\n".join(self._format_issue(issue) for issue in self.issues))

    @property
    def errors(self) -> List[str]:
        """Messages of all issues, in report order."""
        return [issue.message for issue in self.issues]

    @staticmethod
    def _format_issue(issue) -> str:
        if issue.path:
            return f"{issue.path}: {issue.message}"
        return issue.message
