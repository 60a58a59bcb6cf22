from .base import RepositoryError, NotFoundError, ValidationErrors, ValidationFailedError, split_validation_errors

__all__ = ["RepositoryError", "NotFoundError", "ValidationErrors", "ValidationFailedError", "split_validation_errors"]
