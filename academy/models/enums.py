"""Centralized Enum Definitions"""

import enum


class UserRole(str, enum.Enum):
    """User roles for RBAC"""
    ADMIN = "admin"
    STUDENT = "student"


class Branch(str, enum.Enum):
    """Academy branches. Each one owns an independent student-ID sequence."""
    WARDHA = "wardha"
    NAGPUR = "nagpur"
    BUTIBORI = "butibori"
    AKOLA = "akola"
