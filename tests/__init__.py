"""
Tests for Procedural Mesh Generation

This package contains tests for:
- Curves, frames and the random stream (unit/core)
- Tube tessellation, branch growth and tree meshing
- Policy serialization and the report contract
- Export and the command-line interface
"""
