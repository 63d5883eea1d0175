"""
HTTP surface of the random-employee service.

`create_app` builds the FastAPI application; the employee router lives in
`random_employee.api.employees`.
"""

from __future__ import annotations

from random_employee.api.server import create_app

__all__ = ["create_app"]
