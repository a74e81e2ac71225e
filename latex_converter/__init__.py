"""
latex_converter - LaTeX to PDF conversion for journal submission files

Takes a LaTeX main file attached to a submission (plus its dependent images,
styles and included files), compiles it with an external LaTeX toolchain in a
throwaway working directory, and attaches the output back to the submission.

Architecture:
- Submission Context: records, host gateways (storage, repository, notifications)
- Conversion Context: workspace, materialization, compilation, output
  resolution, persistence, orchestration
"""

__version__ = "0.1.0"
