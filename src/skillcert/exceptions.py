# Copyright (c) SkillCert Contributors. All rights reserved.
# Licensed under the MIT License.
"""Centralized exception hierarchy for SkillCert.

All SkillCert exceptions inherit from SkillCertError, so callers can
handle every registry failure with a single except clause.
"""


class SkillCertError(Exception):
    """Base exception for all SkillCert errors."""


class UnauthorizedError(SkillCertError):
    """The caller lacks the role required by the operation."""


class InvalidArgumentError(SkillCertError):
    """A required argument was null, empty, or out of range."""


class NotFoundError(SkillCertError):
    """The referenced certificate was never issued."""


class StorageError(SkillCertError):
    """Errors reading or writing a registry snapshot."""


__all__ = [
    "SkillCertError",
    "UnauthorizedError",
    "InvalidArgumentError",
    "NotFoundError",
    "StorageError",
]
