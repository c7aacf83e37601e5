"""create-karetech-stack: scaffold KareTech web-application starter projects.

Resolves a project configuration from CLI flags, an optional config file, a
named preset, wizard answers and built-in defaults, validates it, and renders
the starter project from Jinja2 templates.
"""

__version__ = "1.0.0"
