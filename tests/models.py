"""
Plain domain models used as build targets in the test suite.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


@dataclass
class Address:
    street: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None


@dataclass
class User:
    id: Optional[int] = None
    name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[Role] = None
    addr: Optional[Address] = None


@dataclass
class Node:
    """Self-referencing type for nested build depth tests."""
    label: Optional[str] = None
    children: Optional[List["Node"]] = None


@dataclass
class Release:
    """Fields share names with the build() parameters."""
    variant: Optional[str] = None
    override: Optional[str] = None
    entity_type: Optional[str] = None


class Account:
    """Needs constructor arguments, so blueprints must supply a constructor."""

    def __init__(self, owner: str, balance: int):
        self.owner = owner
        self.balance = balance
