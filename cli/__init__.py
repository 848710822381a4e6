"""CLI package for the Goodreads shelf cache"""
from .main import cli

__all__ = ['cli']
