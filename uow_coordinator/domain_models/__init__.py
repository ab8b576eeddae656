"""Declarative base for repository models."""

from uow_coordinator.domain_models.base import SQLBase

__all__ = ["SQLBase"]
