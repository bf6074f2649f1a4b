"""
Detection Log Service - Storage Module

This module handles data storage and retrieval.
"""

from .database import Database

__all__ = ['Database']
