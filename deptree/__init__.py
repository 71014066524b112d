"""deptree: transitive dependency trees for npm packages."""

__version__ = "0.1.0"
