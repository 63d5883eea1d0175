"""
random-employee service.

A small FastAPI service that delays its startup, binds its listener, and
then writes a `service-ready` marker file containing a resource-usage
snapshot for external readiness probing.

* `random_employee.config` - Settings model and loader.
* `random_employee.startup` - Delay, bind, readiness sequencing.
* `random_employee.api` - FastAPI application and employee router.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
