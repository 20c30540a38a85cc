"""
Books Modules.

Thin orchestration layers over the Books Kernel and Engines.

Modules:
- Assets: capital asset registration, depreciation commits, disposal
"""
