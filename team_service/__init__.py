# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Team formation and role-conflict resolution service."""

__version__ = "1.0.0"
