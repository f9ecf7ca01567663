from .works import WorksRepository
from . import models

__all__ = ["WorksRepository", "models"]
