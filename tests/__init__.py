"""
Tests for the genericdao package.

This directory contains unit tests for:
- The names mapping record (names_record.py)
- Search models (base.py)
- Data mappers (mapper.py)
- The storage factory and setup script
"""
