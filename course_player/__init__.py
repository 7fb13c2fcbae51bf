"""Course Player: module sequencing, quiz assessment and grade reporting."""

__version__ = "0.1.0"
