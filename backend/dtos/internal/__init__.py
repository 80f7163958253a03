"""
Internal DTOs

Options passed between the list page and the services. These are plain
dataclasses, not linked to entities.
"""
