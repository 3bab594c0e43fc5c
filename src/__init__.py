"""
Scripture Evolution - Community Governance Pipeline

Proposed text moves one way through the pipeline: compliance screening,
staged refinement, a weighted human and automated vote, and finally
collision-free placement into the versioned canon. Edits to published
entries re-enter the pipeline through the revision workflow.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
