"""Infrastructure layer: config store, session log files, beep driver.

This layer depends on stdlib, pydantic, and domain models.
It must never import from services, commands, or output.
"""
