"""
FastAPI RESTful API for the Bookstore Catalog.

This module provides a REST API for:
- Book and author catalog management
- User registration and login
- JSON Web Token authentication with role-based access
"""
