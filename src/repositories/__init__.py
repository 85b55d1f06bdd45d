"""Data access layer over the relational store."""

from src.repositories.posts import PostRepository
from src.repositories.users import UserRepository

__all__ = [
    "PostRepository",
    "UserRepository",
]
