# PATH: /OperativeX/OperativeX/__init__.py
"""OperativeX project package: settings, routing and session/navigation glue."""
