"""Infrastructure adapters.

Why a package:
- Groups everything that touches processes, xcodebuild output or files.
- The Core talks to these through plain functions or `core.interfaces`.
"""
