"""Pull request size reports.

Renders the size report comment for one toolchain and keeps a single,
up-to-date copy of it on the pull request:
  - Total and text section size, old vs new
  - Per-crate size breakdown
  - Dependency tree diff
"""
