"""
Service Models Package

Pydantic request models (input) and response models (output) shared by the
handlers and the services.
"""
