"""
Service layer abstraction.

Each service encapsulates business logic for a domain so that API
handlers stay thin and storage details can change without touching
the routes.
"""
